"""The answer set that drives one generation run.

An ``AnswerSet`` is collected once (command-line flags, an answers JSON file,
or ``APIGEN_*`` environment variables) and then passed by value through the
whole materialization pipeline.  It is frozen: nothing downstream may change
the user's answers mid-run.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apigen.utils import load_json

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

# Environment variable -> field name.
_ENV_FIELDS: dict[str, str] = {
    "APIGEN_PROJECT_NAME": "project_name",
    "APIGEN_KESTREL_HTTP_PORT": "kestrel_http_port",
    "APIGEN_IIS_HTTP_PORT": "iis_http_port",
    "APIGEN_IIS_HTTPS_PORT": "iis_https_port",
    "APIGEN_DATA_PROVIDER": "data_provider",
    "APIGEN_DELETE_CONTENT": "delete_content",
}


class AnswerSet(BaseModel):
    """User answers for a single generation run.

    Field aliases match the answer names the interactive generator used
    (``projectName``, ``kestrelHttpPort``...), so answers files written for it
    load unchanged.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    project_name: str = Field(..., alias="projectName", description="PascalCase project name")
    kestrel_http_port: int = Field(..., alias="kestrelHttpPort", ge=1, le=65535)
    iis_http_port: int = Field(..., alias="iisHttpPort", ge=1, le=65535)
    iis_https_port: int = Field(..., alias="iisHttpsPort", ge=1, le=65535)
    data_provider: str = Field(
        default="p",
        alias="dataProvider",
        description="Raw data provider selector (p, ms, n, ...)",
    )
    delete_content: bool = Field(
        default=True,
        alias="deleteContent",
        description="Empty the destination (except .git) before writing",
    )

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        value = value.strip()
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(
                f"{value!r} is not a valid project name "
                "(letters, digits and underscores, optionally dot-separated)"
            )
        return value

    @field_validator("data_provider")
    @classmethod
    def _strip_provider(cls, value: str) -> str:
        return value.strip()

    @property
    def lower_project_name(self) -> str:
        return self.project_name.lower()

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path, **overrides: Any) -> "AnswerSet":
        """Load answers from a JSON file.

        Args:
            path: JSON file with camelCase or snake_case keys.
            **overrides: Field values that take precedence over the file
                (``None`` values are ignored).

        Returns:
            A validated ``AnswerSet``.
        """
        data = load_json(path)
        return cls.model_validate(_merge(data, overrides))

    @classmethod
    def from_env(cls, **overrides: Any) -> "AnswerSet":
        """Build answers from ``APIGEN_*`` environment variables plus overrides."""
        return cls.model_validate(_merge(_env_answers(), overrides))

    @classmethod
    def collect(cls, answers_file: str | Path | None = None, **overrides: Any) -> "AnswerSet":
        """Collect answers from every source the command line supports.

        Precedence, lowest first: environment variables, the answers file,
        then *overrides* (command-line flags).
        """
        data = _env_answers()
        if answers_file is not None:
            data = _merge(data, load_json(answers_file))
        return cls.model_validate(_merge(data, overrides))


def _env_answers() -> dict[str, Any]:
    data: dict[str, Any] = {}
    for var, field_name in _ENV_FIELDS.items():
        if os.environ.get(var):
            data[field_name] = os.environ[var]
    return data


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Overlay non-``None`` overrides onto *base*, normalising aliases to field names."""
    merged: dict[str, Any] = {}
    aliases = {f.alias: name for name, f in AnswerSet.model_fields.items() if f.alias}
    for key, value in base.items():
        merged[aliases.get(key, key)] = value
    for key, value in overrides.items():
        if value is not None:
            merged[aliases.get(key, key)] = value
    return merged
