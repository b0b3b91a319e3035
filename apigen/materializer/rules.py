"""Per-file inclusion and renaming.

Both functions work on paths relative to the template root; the engine joins
the result onto the destination root.
"""

from __future__ import annotations

import re
from fnmatch import fnmatchcase
from pathlib import PurePath

from .answers import AnswerSet
from .variants import VariantDescriptor

PROJECT_PLACEHOLDER = "StarterKit"
LOWER_PROJECT_PLACEHOLDER = "starterkit"
_PLACEHOLDER_RE = re.compile(f"{PROJECT_PLACEHOLDER}|{LOWER_PROJECT_PLACEHOLDER}")

# Files renamed regardless of variant.
LEGACY_RENAMES: dict[str, str] = {
    ".npmignore": ".gitignore",
}


def should_include(relative_path: str | PurePath, variant: VariantDescriptor) -> bool:
    """Return ``False`` if the file belongs only to providers other than the active one.

    The file name is matched against every excluded pattern of *variant*; one
    match is enough to drop it.
    """
    name = PurePath(relative_path).name
    return not any(fnmatchcase(name, pattern) for pattern in variant.excluded_patterns)


def rename_file_path(
    relative_path: str | PurePath,
    answers: AnswerSet,
    variant: VariantDescriptor,
) -> PurePath:
    """Compute the destination path of a template file, relative to the output root.

    Every path segment gets the project name substituted (``StarterKit`` and
    ``starterkit`` independently).  The file name is then mapped through the
    legacy renames and the variant's canonical renames, which are keyed by the
    original template file name.
    """
    source = PurePath(relative_path)
    parts = [_rename_segment(part, answers) for part in source.parts]

    original_name = source.name
    if original_name in LEGACY_RENAMES:
        parts[-1] = LEGACY_RENAMES[original_name]
    elif original_name in variant.canonical_renames:
        parts[-1] = _rename_segment(variant.canonical_renames[original_name], answers)

    return PurePath(*parts)


def _rename_segment(segment: str, answers: AnswerSet) -> str:
    replacements = {
        PROJECT_PLACEHOLDER: answers.project_name,
        LOWER_PROJECT_PLACEHOLDER: answers.lower_project_name,
    }
    return _PLACEHOLDER_RE.sub(lambda m: replacements[m.group(0)], segment)
