"""The substitution table applied to every text file of the template.

The table is an ordered list of literal ``(pattern, replacement)`` pairs that
is compiled into a single regular-expression alternation and applied in one
pass.  Two consequences follow and are relied upon:

* Text produced by a replacement is never scanned again, so a fragment that
  contains ``StarterKit`` or a marker-looking string stays exactly as rendered.
* Where two patterns could match at the same position, the one listed first
  wins.  Table order is: project names, provider class names, GUIDs, ports,
  marker tokens.

Marker tokens whose slot is unknown are not in the table and therefore stay in
the output verbatim.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from .answers import AnswerSet
from .rules import LOWER_PROJECT_PLACEHOLDER, PROJECT_PLACEHOLDER
from .variants import DATA_PROVIDERS, VariantDescriptor


# ---------------------------------------------------------------------------
# Placeholders baked into the template
# ---------------------------------------------------------------------------

# Fixed GUIDs in the template solution/project files, keyed by what they identify.
GUID_PLACEHOLDERS: dict[str, str] = {
    "solution_items": "C3E0690A-0044-402C-90D2-2DC0FF14980F",
    "src_folder": "05A3A5CE-4659-4E00-A4BB-4129AEBEE7D0",
    "test_folder": "079636FA-0D93-4251-921A-013355153BF5",
    "api_project": "BD79C050-331F-4733-87DE-F650976253B5",
    "integration_tests_project": "948E75FD-C478-4001-AFBE-4D87181E1BEC",
    "unit_tests_project": "0A3016FD-A06C-4AA1-A843-DEA6A2F01696",
    "user_secrets": "9F6E1C2A-7B3D-4E58-A1C4-3D2B6F8E0A17",
    "solution": "E5B2D8F1-4C6A-4A9E-B7D3-1F0C8A2E6B94",
}

KESTREL_HTTP_PLACEHOLDER = "http://localhost:51002"
IIS_HTTP_PLACEHOLDER = "http://localhost:51001"
IIS_HTTPS_PLACEHOLDER = '"sslPort": 44300'

# Provider-specific C# types that lose their tag in the output.
PROVIDER_TAGGED_TYPES: tuple[str, ...] = (
    "DataAccessSettingsConfigKey",
    "DataAccessSettings",
)

MARKER_CATEGORY = "dataaccess"


def line_marker(slot: str, category: str = MARKER_CATEGORY) -> str:
    """``//--dataaccess-<slot>--`` style marker, used in C# sources."""
    return f"//--{category}-{slot}--"


def block_marker(slot: str, category: str = MARKER_CATEGORY) -> str:
    """``<!-- dataaccess-<slot> -->`` style marker, used in XML project files."""
    return f"<!-- {category}-{slot} -->"


def default_id_factory() -> str:
    """Fresh upper-case GUID string, the format Visual Studio writes."""
    return str(uuid.uuid4()).upper()


def generate_identifiers(id_factory: Callable[[], str] | None = None) -> dict[str, str]:
    """Generate one identifier per GUID placeholder.

    Identifiers are generated in the fixed order of ``GUID_PLACEHOLDERS`` so a
    deterministic *id_factory* yields a deterministic mapping.

    Returns:
        ``{placeholder_guid: new_identifier}``.
    """
    factory = id_factory or default_id_factory
    return {placeholder: factory().upper() for placeholder in GUID_PLACEHOLDERS.values()}


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Substitution:
    """One literal replacement.  ``label`` is only used for reporting."""

    pattern: str
    replacement: str
    label: str = ""


class SubstitutionTable:
    """An ordered set of literal substitutions applied in a single pass."""

    def __init__(self, entries: Iterable[Substitution]) -> None:
        self.entries: tuple[Substitution, ...] = tuple(entries)
        self._lookup: dict[str, str] = {}
        for entry in self.entries:
            if not entry.pattern:
                raise ValueError(f"Empty substitution pattern ({entry.label or 'unlabelled'})")
            # First occurrence of a pattern wins, same as in the alternation.
            self._lookup.setdefault(entry.pattern, entry.replacement)
        if self.entries:
            self._regex: re.Pattern[str] | None = re.compile(
                "|".join(re.escape(entry.pattern) for entry in self.entries)
            )
        else:
            self._regex = None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def apply(self, text: str) -> str:
        """Return *text* with every pattern replaced."""
        if self._regex is None:
            return text
        return self._regex.sub(lambda m: self._lookup[m.group(0)], text)


def transform_content(text: str, table: SubstitutionTable) -> str:
    """Apply *table* to the contents of one text file."""
    return table.apply(text)


def build_substitution_table(
    answers: AnswerSet,
    variant: VariantDescriptor,
    identifiers: Mapping[str, str],
) -> SubstitutionTable:
    """Assemble the substitution table for one run.

    Args:
        answers: The run's answers (project name and ports).
        variant: Active variant; its fragments fill the marker tokens.
        identifiers: ``{placeholder_guid: identifier}`` from
            :func:`generate_identifiers`, generated once per run.

    Returns:
        The ordered ``SubstitutionTable``.
    """
    entries: list[Substitution] = [
        Substitution(PROJECT_PLACEHOLDER, answers.project_name, "project name"),
        Substitution(LOWER_PROJECT_PLACEHOLDER, answers.lower_project_name, "lowercase project name"),
    ]

    for type_name in PROVIDER_TAGGED_TYPES:
        for provider in DATA_PROVIDERS:
            entries.append(
                Substitution(f"{type_name}{provider.class_tag}", type_name, f"{type_name} type")
            )

    guid_names = {guid: name for name, guid in GUID_PLACEHOLDERS.items()}
    for placeholder, identifier in identifiers.items():
        entries.append(
            Substitution(placeholder, identifier, f"guid {guid_names.get(placeholder, '?')}")
        )

    entries.extend([
        Substitution(
            KESTREL_HTTP_PLACEHOLDER,
            f"http://localhost:{answers.kestrel_http_port}",
            "kestrel http port",
        ),
        Substitution(
            IIS_HTTP_PLACEHOLDER,
            f"http://localhost:{answers.iis_http_port}",
            "iis http port",
        ),
        Substitution(
            IIS_HTTPS_PLACEHOLDER,
            f'"sslPort": {answers.iis_https_port}',
            "iis https port",
        ),
    ])

    for slot, fragment in variant.fragments.items():
        entries.append(Substitution(line_marker(slot), fragment, f"marker {slot}"))
        entries.append(Substitution(block_marker(slot), fragment, f"marker {slot}"))

    return SubstitutionTable(entries)
