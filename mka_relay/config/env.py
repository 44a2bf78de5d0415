"""mka_relay.config.env
=====================

Environment variable names for relay credentials.

Purpose
-------
- Map each credential-bearing config section to its canonical environment
  variable and accepted aliases (canonical first).
- Detect placeholder values so a template ``.env`` never counts as a real key.

Failure Modes
-------------
Helpers return ``None`` when a section is unknown or nothing is set; callers
decide whether a missing key is fatal (the proxy answers 500).
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

# Section → canonical env var holding its API key
ENV_MAP: Dict[str, str] = {
    "upstream": "UPSTREAM_API_KEY",
    "speech": "SPEECH_API_KEY",
}

# Section → ordered acceptable env var names (canonical first). The aliases
# are the names the hosted deployment already uses.
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "upstream": ("UPSTREAM_API_KEY", "LOVABLE_API_KEY"),
    "speech": ("SPEECH_API_KEY", "OPENAI_API_KEY"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if ``val`` looks like a placeholder or test value.

    Heuristics (case-insensitive): contains 'placeholder', 'changeme' or
    'example', or starts with 'test_'.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def get_env_var_candidates(section: str) -> Iterable[str]:
    """Yield env var names for ``section`` in priority order."""
    s = (section or "").lower()
    canonical = ENV_MAP.get(s)
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(s, ()):
        if alias != canonical:
            yield alias


def resolve_key(section: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, env_var_used)`` for the first non-placeholder key."""
    for name in get_env_var_candidates(section):
        val = os.environ.get(name)
        if val and not is_placeholder(val):
            return val, name
    return None, None


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_key",
]
