"""Update notifier.

Asks the package index for the latest published version of apigen and
compares it to the running one.  The answer is cached on disk so the index is
queried at most once per ``update_check_interval``.  Network trouble never
stops generation; it just means "don't know".
"""

from __future__ import annotations

import time
from dataclasses import dataclass

import httpx

from apigen.config import GeneratorConfig
from apigen.utils import is_newer, load_json, save_json


@dataclass
class UpdateInfo:
    """Outcome of an update check."""

    current: str
    latest: str | None
    from_cache: bool = False

    @property
    def update_available(self) -> bool:
        return self.latest is not None and is_newer(self.latest, self.current)


async def fetch_latest_version(index_url: str, timeout: float = 5.0) -> str | None:
    """Return the latest version published at *index_url*, or ``None``.

    *index_url* is a PyPI-style JSON endpoint (``.../pypi/<name>/json``).
    A malformed URL counts as "don't know" like any network failure.
    """
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=3.0)) as client:
            response = await client.get(index_url)
            response.raise_for_status()
            return str(response.json()["info"]["version"])
    except (httpx.HTTPError, httpx.InvalidURL, KeyError, TypeError, ValueError):
        return None


async def check_for_update(
    current: str,
    config: GeneratorConfig,
    *,
    now: float | None = None,
) -> UpdateInfo:
    """Compare *current* with the latest published version.

    Args:
        current: The running version.
        config: Supplies the index URL, cache location and check interval.
        now: Current epoch seconds (tests).

    Returns:
        An ``UpdateInfo``; ``latest`` is ``None`` when the index could not be
        reached and nothing usable was cached.
    """
    now = time.time() if now is None else now
    state = _load_state(config)

    checked_at = state.get("checked_at")
    if (
        isinstance(checked_at, (int, float))
        and state.get("latest")
        and now - checked_at < config.update_check_interval
    ):
        return UpdateInfo(current=current, latest=str(state["latest"]), from_cache=True)

    latest = await fetch_latest_version(config.index_url)
    if latest is not None:
        try:
            await save_json({"checked_at": now, "latest": latest}, config.update_state_path)
        except OSError:
            # Read-only cache dir: check again next run.
            pass
    return UpdateInfo(current=current, latest=latest)


def _load_state(config: GeneratorConfig) -> dict:
    path = config.update_state_path
    if not path.exists():
        return {}
    try:
        return load_json(path)
    except (OSError, ValueError):
        return {}
