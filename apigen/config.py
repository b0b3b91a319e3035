"""apigen configuration.

Typed settings for everything that is not a user answer: where the template
lives, where output goes, and how the update notifier behaves.  Like the
answers, settings can come from the environment (``APIGEN_*``) or a JSON file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from apigen.materializer.engine import default_template_dir

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


class GeneratorConfig(BaseModel):
    """Global generator configuration.

    Created once by the CLI entry point and passed down from there.
    """

    template_dir: Path = Field(default_factory=default_template_dir)
    output_dir: Path = Field(default_factory=Path.cwd)
    check_updates: bool = Field(default=True)
    update_check_interval: int = Field(
        default=300, ge=0, description="Seconds between two queries of the package index"
    )
    index_url: str = Field(default="https://pypi.org/pypi/apigen/json")
    cache_dir: Path = Field(default_factory=lambda: Path.home() / ".cache" / "apigen")
    verbose: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def update_state_path(self) -> Path:
        """Path to the cached update-check state."""
        return self.cache_dir / "update-check.json"

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, **overrides: Any) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            APIGEN_TEMPLATE_DIR, APIGEN_OUTPUT_DIR, APIGEN_CHECK_UPDATES,
            APIGEN_UPDATE_INTERVAL, APIGEN_INDEX_URL, APIGEN_CACHE_DIR,
            APIGEN_VERBOSE.

        Keyword overrides that are not ``None`` win over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("APIGEN_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["APIGEN_TEMPLATE_DIR"])
        if os.environ.get("APIGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["APIGEN_OUTPUT_DIR"])
        if os.environ.get("APIGEN_CHECK_UPDATES"):
            kwargs["check_updates"] = os.environ["APIGEN_CHECK_UPDATES"].lower() in _TRUE_VALUES
        if os.environ.get("APIGEN_UPDATE_INTERVAL"):
            kwargs["update_check_interval"] = int(os.environ["APIGEN_UPDATE_INTERVAL"])
        if os.environ.get("APIGEN_INDEX_URL"):
            kwargs["index_url"] = os.environ["APIGEN_INDEX_URL"]
        if os.environ.get("APIGEN_CACHE_DIR"):
            kwargs["cache_dir"] = Path(os.environ["APIGEN_CACHE_DIR"])
        if os.environ.get("APIGEN_VERBOSE"):
            kwargs["verbose"] = os.environ["APIGEN_VERBOSE"].lower() in _TRUE_VALUES

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
