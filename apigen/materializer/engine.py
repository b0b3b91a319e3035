"""Template materialization engine.

Turns a template tree plus an ``AnswerSet`` into a concrete project tree:

1. Discover every file under the template root (sorted, dotfiles included).
2. Plan: drop files of inactive providers, compute destination paths and
   reject destination collisions.  Nothing has been touched on disk yet.
3. Optionally empty the destination, keeping ``.git``.
4. For each planned file, one after the other: read, substitute (text files
   only), write.

There is no rollback.  An I/O error in step 4 aborts the run and leaves the
files written so far in place.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Callable

from rich.markup import escape

from apigen.utils import console, print_step

from .answers import AnswerSet
from .errors import (
    DestinationCollisionError,
    MaterializeError,
    TemplateIOError,
    TemplateNotFoundError,
)
from .rules import rename_file_path, should_include
from .substitutions import (
    SubstitutionTable,
    build_substitution_table,
    generate_identifiers,
    transform_content,
)
from .variants import VariantDescriptor, resolve_variant

_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "starterkit"

# Entries of the destination that survive a destructive clear.
PRESERVED_ENTRIES: frozenset[str] = frozenset({".git"})


def default_template_dir() -> Path:
    """The StarterKit template bundled with the package."""
    return _DEFAULT_TEMPLATE_DIR


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass
class TemplateFile:
    """One file of the template tree, loaded for transformation."""

    source: Path
    relative: PurePath
    content: bytes
    is_text: bool

    @classmethod
    def load(cls, source: Path, relative: PurePath) -> "TemplateFile":
        try:
            content = source.read_bytes()
        except OSError as exc:
            raise TemplateIOError("read", source, exc) from exc
        return cls(source=source, relative=relative, content=content, is_text=is_text(content))

    def render(self, table: SubstitutionTable) -> bytes:
        """Return the bytes to write: substituted for text, untouched for binary."""
        if not self.is_text:
            return self.content
        return transform_content(self.content.decode("utf-8"), table).encode("utf-8")


@dataclass
class PlannedFile:
    source: Path
    relative: PurePath
    destination: Path


@dataclass
class MaterializePlan:
    """Files to write, in order, and the template files left out."""

    files: list[PlannedFile] = field(default_factory=list)
    skipped: list[PurePath] = field(default_factory=list)


@dataclass
class MaterializeResult:
    destination: Path
    variant: str
    written: list[Path] = field(default_factory=list)
    skipped: list[PurePath] = field(default_factory=list)
    identifiers: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Materializer
# ---------------------------------------------------------------------------


class Materializer:
    """Materializes one template tree into one destination for one answer set.

    Attributes:
        source_root: Template root directory (read only).
        dest_root: Output directory.
        answers: The run's answers.
        variant: Descriptor resolved from ``answers.data_provider``.
    """

    def __init__(
        self,
        source_root: str | Path,
        dest_root: str | Path,
        answers: AnswerSet,
        *,
        id_factory: Callable[[], str] | None = None,
        strict_provider: bool = False,
        verbose: bool = False,
        fragment_dir: str | Path | None = None,
    ) -> None:
        self.source_root = Path(source_root).resolve()
        self.dest_root = Path(dest_root).resolve()
        self.answers = answers
        self.id_factory = id_factory
        self.verbose = verbose
        self.variant: VariantDescriptor = resolve_variant(
            answers.data_provider,
            project_name=answers.project_name,
            strict=strict_provider,
            fragment_dir=fragment_dir,
        )

    # -- Public API --------------------------------------------------------

    async def materialize(self) -> MaterializeResult:
        """Run discovery, planning, the optional clear and the writes.

        Returns:
            A ``MaterializeResult`` listing written and skipped files and the
            identifiers generated for the GUID placeholders.

        Raises:
            TemplateNotFoundError: The template root is missing.
            DestinationCollisionError: Two files rename onto one destination.
            TemplateIOError: A read, write or delete failed; the run stops.
        """
        self._check_roots()
        sources = await asyncio.to_thread(discover_files, self.source_root)
        plan = self.plan(sources)

        if self.answers.delete_content:
            print_step("Emptying target directory...")
            await asyncio.to_thread(clear_destination, self.dest_root)

        identifiers = generate_identifiers(self.id_factory)
        table = build_substitution_table(self.answers, self.variant, identifiers)

        print_step("Creating project skeleton...")
        result = MaterializeResult(
            destination=self.dest_root,
            variant=self.variant.name,
            skipped=list(plan.skipped),
            identifiers=identifiers,
        )
        for planned in plan.files:
            template = await asyncio.to_thread(TemplateFile.load, planned.source, planned.relative)
            data = template.render(table)
            await asyncio.to_thread(_write_file, planned.destination, data, planned.source)
            result.written.append(planned.destination)
            if self.verbose:
                created = planned.destination.relative_to(self.dest_root)
                console.print(f"  [green]create[/green] {escape(str(created))}")

        return result

    def plan(self, sources: list[PurePath]) -> MaterializePlan:
        """Filter and rename *sources* (paths relative to the template root).

        Raises:
            DestinationCollisionError: If two included files share a destination.
        """
        plan = MaterializePlan()
        claimed: dict[Path, PurePath] = {}
        for relative in sources:
            if not should_include(relative, self.variant):
                plan.skipped.append(relative)
                continue
            destination = self.dest_root / rename_file_path(relative, self.answers, self.variant)
            if destination in claimed:
                raise DestinationCollisionError(
                    destination,
                    [self.source_root / claimed[destination], self.source_root / relative],
                )
            claimed[destination] = relative
            plan.files.append(PlannedFile(self.source_root / relative, relative, destination))
        return plan

    # -- Internals ---------------------------------------------------------

    def _check_roots(self) -> None:
        if not self.source_root.is_dir():
            raise TemplateNotFoundError(self.source_root)
        if self.dest_root.is_relative_to(self.source_root):
            raise MaterializeError(
                f"Destination {self.dest_root} must not lie inside the template directory "
                f"{self.source_root}"
            )
        # Only the clear can reach a template nested in the destination.
        if self.answers.delete_content and self.source_root.is_relative_to(self.dest_root):
            raise MaterializeError(
                f"Template directory {self.source_root} lies inside destination "
                f"{self.dest_root}; emptying it would delete the template"
            )


async def materialize(
    source_root: str | Path,
    dest_root: str | Path,
    answers: AnswerSet,
    **kwargs,
) -> MaterializeResult:
    """Shortcut for ``Materializer(source_root, dest_root, answers, **kwargs).materialize()``."""
    return await Materializer(source_root, dest_root, answers, **kwargs).materialize()


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def discover_files(root: Path) -> list[PurePath]:
    """Return every regular file under *root*, relative to it and sorted."""
    try:
        return sorted(p.relative_to(root) for p in root.rglob("*") if p.is_file())
    except OSError as exc:
        raise TemplateIOError("list", root, exc) from exc


def clear_destination(root: Path, preserve: frozenset[str] = PRESERVED_ENTRIES) -> list[Path]:
    """Delete everything directly under *root* except the names in *preserve*.

    A missing *root* is not an error.  Symlinks are removed, never followed.

    Returns:
        The removed top-level entries.
    """
    if not root.exists():
        return []
    removed: list[Path] = []
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        raise TemplateIOError("list", root, exc) from exc
    for entry in entries:
        if entry.name in preserve:
            continue
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as exc:
            raise TemplateIOError("delete", entry, exc) from exc
        removed.append(entry)
    return removed


def is_text(content: bytes) -> bool:
    """Heuristic: NUL-free content that decodes as UTF-8 is text."""
    if b"\x00" in content:
        return False
    try:
        content.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def _write_file(path: Path, data: bytes, mode_source: Path | None = None) -> None:
    """Synchronous helper: create parent dirs, write bytes, copy permission bits."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        if mode_source is not None:
            shutil.copymode(mode_source, path)
    except OSError as exc:
        raise TemplateIOError("write", path, exc) from exc
