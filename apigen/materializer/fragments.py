"""Jinja2 rendering of data-provider fragments.

Each provider owns a directory of ``<slot>.j2`` templates under
``snippets/``; slots a provider does not override fall back to
``snippets/common/``.  The rendered text is what replaces a marker token such
as ``//--dataaccess-startupServices--`` in the template tree.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

_DEFAULT_FRAGMENT_DIR = Path(__file__).parent / "snippets"

# Package versions pinned by the starter kit.
EF_CORE_VERSION = "3.1.9"


class FragmentRenderer:
    """Renders the fragment templates of one provider.

    The loader searches the provider directory first and ``common/`` second,
    so ``{% include %}`` works across both.
    """

    def __init__(self, provider_dir: str, fragment_dir: str | Path | None = None) -> None:
        if fragment_dir is None:
            fragment_dir = _DEFAULT_FRAGMENT_DIR
        self.fragment_dir = Path(fragment_dir)
        self.env = Environment(
            loader=FileSystemLoader(
                [str(self.fragment_dir / provider_dir), str(self.fragment_dir / "common")]
            ),
            autoescape=select_autoescape([]),
            keep_trailing_newline=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, slot: str, context: dict[str, Any]) -> str:
        """Render the fragment for *slot* (``"package"``, ``"tools"``...)."""
        template = self.env.get_template(f"{slot}.j2")
        return template.render(ef_core_version=EF_CORE_VERSION, **context)

    def render_all(self, slots: tuple[str, ...], context: dict[str, Any]) -> dict[str, str]:
        """Render every slot in *slots* and return ``{slot: text}``."""
        return {slot: self.render(slot, context) for slot in slots}
