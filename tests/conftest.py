"""Shared pytest fixtures for the apigen test suite.

Provides reusable fixtures for:
- Answer sets (one per data provider)
- Deterministic identifier factories
- A small hand-built template tree
- An isolated generator configuration (no network, no home cache)
"""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Callable

import pytest

from apigen.config import GeneratorConfig
from apigen.materializer import AnswerSet


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------

@pytest.fixture
def make_answers() -> Callable[..., AnswerSet]:
    """Factory for ``AnswerSet`` objects with the FooApi defaults."""

    def _make(**overrides) -> AnswerSet:
        data = {
            "project_name": "FooApi",
            "kestrel_http_port": 6002,
            "iis_http_port": 6001,
            "iis_https_port": 44362,
            "data_provider": "p",
            "delete_content": True,
        }
        data.update(overrides)
        return AnswerSet(**data)

    return _make


@pytest.fixture
def answers(make_answers) -> AnswerSet:
    """PostgreSQL answers for the FooApi project."""
    return make_answers()


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

def _counting_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"00000000-0000-0000-0000-{next(counter):012d}"


@pytest.fixture
def fixed_id_factory() -> Callable[[], Callable[[], str]]:
    """Returns a function that builds a fresh deterministic id factory.

    Every factory it returns yields the same sequence
    ``00000000-0000-0000-0000-000000000001``, ``...002`` and so on.
    """
    return _counting_factory


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

MINI_TEMPLATE: dict[str, str] = {
    ".npmignore": "bin/\nobj/\n",
    "StarterKit.sln": (
        'Project("{9A19103F-16F7-4668-BE54-9A1E7A4F7556}") = "StarterKit", '
        '"src\\StarterKit\\StarterKit.csproj", "{BD79C050-331F-4733-87DE-F650976253B5}"\n'
        "{BD79C050-331F-4733-87DE-F650976253B5} = {05A3A5CE-4659-4E00-A4BB-4129AEBEE7D0}\n"
    ),
    "src/StarterKit/StarterKit.csproj": (
        "<ItemGroup>\n"
        "    <!-- dataaccess-package -->\n"
        "    <!-- dataaccess-tools -->\n"
        "</ItemGroup>\n"
    ),
    "src/StarterKit/Startup.cs": (
        "//--dataaccess-startupImports--\n"
        "namespace StarterKit.Startup\n"
        "//--dataaccess-startupServices--\n"
        "//--dataaccess-unknownSlot--\n"
    ),
    "src/StarterKit/launchSettings.json": (
        '"applicationUrl": "http://localhost:51001",\n'
        '"sslPort": 44300\n'
        '"applicationUrl": "http://localhost:51002"\n'
    ),
    "src/StarterKit/_config/dataaccess.npg.json": '{"DbName": "starterkit", "Port": "5432"}\n',
    "src/StarterKit/_config/dataaccess.ms.json": '{"DbName": "starterkit", "Port": "1433"}\n',
    "src/StarterKit/DataAccess/EntityContext.cs": "namespace StarterKit.DataAccess {}\n",
    "src/StarterKit/DataAccess/DataAccessDefaults.cs": 'const string SchemaName = "starterkit";\n',
    "src/StarterKit/DataAccess/Options/DataAccessSettings.npg.cs": "class DataAccessSettingsNpg // npg\n",
    "src/StarterKit/DataAccess/Options/DataAccessSettings.ms.cs": "class DataAccessSettingsMs // ms\n",
    "src/StarterKit/DataAccess/Options/DataAccessSettingsConfigKey.npg.cs": "class DataAccessSettingsConfigKeyNpg\n",
    "src/StarterKit/DataAccess/Options/DataAccessSettingsConfigKey.ms.cs": "class DataAccessSettingsConfigKeyMs\n",
}


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Write ``{relative_path: content}`` under *root* and return *root*."""
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def mini_template(tmp_path: Path) -> Path:
    """A small StarterKit-shaped template tree covering every placeholder kind."""
    return write_tree(tmp_path / "template", MINI_TEMPLATE)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty destination directory."""
    out = tmp_path / "out"
    out.mkdir()
    return out


def relative_files(root: Path) -> set[str]:
    """All files under *root* as POSIX relative paths, ``.git`` excluded."""
    return {
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.is_file() and ".git" not in p.relative_to(root).parts
    }


# ---------------------------------------------------------------------------
# Config fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def generator_config(tmp_path: Path, output_dir: Path) -> GeneratorConfig:
    """Config writing into ``output_dir`` with updates off and a temp cache."""
    return GeneratorConfig(
        output_dir=output_dir,
        check_updates=False,
        cache_dir=tmp_path / "cache",
    )


@pytest.fixture(autouse=True)
def _clean_apigen_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's ``APIGEN_*`` variables out of the tests."""
    import os

    for var in list(os.environ):
        if var.startswith("APIGEN_"):
            monkeypatch.delenv(var, raising=False)
