"""Data-provider variants and the file applicability table.

A variant decides three things about a run:

* which fragments replace the ``dataaccess`` marker tokens,
* which provider-specific template files are left out,
* which provider-tagged file names collapse onto their canonical name
  (``dataaccess.npg.json`` -> ``dataaccess.json``).

Everything here is a pure lookup; nothing touches the filesystem except the
jinja2 loader reading fragment templates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from apigen.utils import print_warning

from .errors import UnknownVariantError
from .fragments import FragmentRenderer


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class Provider(str, Enum):
    """Database provider wired into the generated solution."""
    POSTGRES = "postgres"
    MSSQL = "mssql"
    NONE = "none"

    @property
    def file_tag(self) -> str | None:
        """Tag used in provider-specific file names (``dataaccess.npg.json``)."""
        return _FILE_TAGS[self]

    @property
    def class_tag(self) -> str | None:
        """Tag used in provider-specific C# class names (``DataAccessSettingsNpg``)."""
        return _CLASS_TAGS[self]


_FILE_TAGS: dict[Provider, str | None] = {
    Provider.POSTGRES: "npg",
    Provider.MSSQL: "ms",
    Provider.NONE: None,
}

_CLASS_TAGS: dict[Provider, str | None] = {
    Provider.POSTGRES: "Npg",
    Provider.MSSQL: "Ms",
    Provider.NONE: None,
}

# Accepted selector spellings, compared lower-cased and stripped.
SELECTOR_ALIASES: dict[str, Provider] = {
    "p": Provider.POSTGRES,
    "npg": Provider.POSTGRES,
    "postgres": Provider.POSTGRES,
    "postgresql": Provider.POSTGRES,
    "ms": Provider.MSSQL,
    "mssql": Provider.MSSQL,
    "sqlserver": Provider.MSSQL,
    "n": Provider.NONE,
    "no": Provider.NONE,
    "none": Provider.NONE,
    "": Provider.NONE,
}

# Marker slots, in the order their markers are substituted.
FRAGMENT_SLOTS: tuple[str, ...] = (
    "package",
    "startupImports",
    "startupServices",
    "registerConfiguration",
    "variable",
    "getService",
    "config",
    "tools",
)

DATA_PROVIDERS = (Provider.POSTGRES, Provider.MSSQL)


# ---------------------------------------------------------------------------
# File applicability table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileRule:
    """A file-name pattern and the providers it belongs to.

    A file matching ``pattern`` is only part of the output when the active
    provider is in ``providers``.  ``canonical`` is the name it takes once
    included, for provider-tagged files.
    """

    pattern: str
    providers: frozenset[Provider]
    canonical: str | None = None


# Config files that exist once per provider and collapse to one canonical name.
PROVIDER_TAGGED_FILES: tuple[str, ...] = (
    "dataaccess.json",
    "DataAccessSettings.cs",
    "DataAccessSettingsConfigKey.cs",
)

# Provider-agnostic data-access scaffolding, dropped when no provider is chosen.
DATA_ACCESS_FILES: tuple[str, ...] = (
    "EntityContext.cs",
    "DataAccessDefaults.cs",
)


def tagged_name(canonical: str, provider: Provider) -> str:
    """``tagged_name("dataaccess.json", POSTGRES)`` -> ``"dataaccess.npg.json"``."""
    stem, _, suffix = canonical.rpartition(".")
    return f"{stem}.{provider.file_tag}.{suffix}"


def _build_file_rules() -> tuple[FileRule, ...]:
    rules: list[FileRule] = []
    for provider in DATA_PROVIDERS:
        for canonical in PROVIDER_TAGGED_FILES:
            rules.append(
                FileRule(tagged_name(canonical, provider), frozenset({provider}), canonical)
            )
    for name in DATA_ACCESS_FILES:
        rules.append(FileRule(name, frozenset(DATA_PROVIDERS)))
    return tuple(rules)


FILE_RULES: tuple[FileRule, ...] = _build_file_rules()


# ---------------------------------------------------------------------------
# Variant descriptor
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VariantDescriptor:
    """Everything a run needs to know about the selected provider."""

    provider: Provider
    fragments: Mapping[str, str] = field(default_factory=dict)
    excluded_patterns: tuple[str, ...] = ()
    canonical_renames: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.provider.value


def resolve_variant(
    selector: str,
    *,
    project_name: str = "StarterKit",
    strict: bool = False,
    fragment_dir: str | Path | None = None,
) -> VariantDescriptor:
    """Map a raw data-provider selector onto its ``VariantDescriptor``.

    Args:
        selector: What the user answered (``"p"``, ``"ms"``, ``"postgres"``...).
            Case and surrounding whitespace are ignored.
        project_name: Substituted into fragments that name project namespaces.
        strict: Raise instead of falling back when the selector is unknown.
        fragment_dir: Alternative fragment template root (tests).

    Returns:
        The descriptor of the matching provider, or of ``Provider.NONE`` when
        the selector is unknown and *strict* is ``False``.

    Raises:
        UnknownVariantError: If *strict* and the selector is unknown.
    """
    key = (selector or "").strip().lower()
    provider = SELECTOR_ALIASES.get(key)
    if provider is None:
        if strict:
            raise UnknownVariantError(selector)
        print_warning(
            f"Unknown data provider {selector!r}; generating without data access."
        )
        provider = Provider.NONE
    return build_descriptor(provider, project_name=project_name, fragment_dir=fragment_dir)


def build_descriptor(
    provider: Provider,
    *,
    project_name: str = "StarterKit",
    fragment_dir: str | Path | None = None,
) -> VariantDescriptor:
    """Build the descriptor for a known provider."""
    if provider is Provider.NONE:
        fragments = {slot: "" for slot in FRAGMENT_SLOTS}
    else:
        renderer = FragmentRenderer(provider.value, fragment_dir)
        fragments = renderer.render_all(FRAGMENT_SLOTS, {"project_name": project_name})

    excluded = tuple(r.pattern for r in FILE_RULES if provider not in r.providers)
    renames = {
        r.pattern: r.canonical
        for r in FILE_RULES
        if provider in r.providers and r.canonical is not None
    }
    return VariantDescriptor(
        provider=provider,
        fragments=MappingProxyType(fragments),
        excluded_patterns=excluded,
        canonical_renames=MappingProxyType(renames),
    )
