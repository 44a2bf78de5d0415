"""Unified configuration layer for the relay.

Goals
-----
* Centralize defaults (upstream model and URL, system message, voices).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) named by RELAY_CONFIG_FILE
    3. Environment variables ``<SECTION>_<FIELD>`` (e.g. UPSTREAM_MODEL,
       CLIENT_RELAY_BASE_URL, SUPABASE_ANON_KEY)
    4. API keys resolved through :mod:`mka_relay.config.env` aliases
    5. In-code overrides passed to the helper
* Provide a single call site: ``get_section_config(section)``.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML. Structure example:

```
upstream:
  model: google/gemini-2.5-flash
client:
  relay_base_url: https://relay.example.internal
  voice_enabled: true
```

Public API
----------
* get_section_config(section: str, overrides: dict | None = None) -> dict
* reset_config_cache() -> None (tests)
"""
from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    CLIENT_DEFAULT_RELAY_BASE_URL,
    CLIENT_MAX_PENDING_SPEECH,
    DEFAULT_DB_PATH,
    SERVICE_CORS_ORIGINS,
    SERVICE_DEFAULT_HOST,
    SERVICE_DEFAULT_PORT,
    SPEECH_DEFAULT_VOICE,
    SPEECH_STT_MODEL,
    SPEECH_TTS_MODEL,
    UPSTREAM_DEFAULT_BASE_URL,
    UPSTREAM_DEFAULT_MODEL,
    UPSTREAM_SYSTEM_MESSAGE,
)
from .env import is_placeholder, resolve_key


# -------------------- Defaults --------------------

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "upstream": {
        "base_url": UPSTREAM_DEFAULT_BASE_URL,
        "model": UPSTREAM_DEFAULT_MODEL,
        "system_message": UPSTREAM_SYSTEM_MESSAGE,
        "api_key": None,
    },
    "speech": {
        "base_url": None,
        "tts_model": SPEECH_TTS_MODEL,
        "stt_model": SPEECH_STT_MODEL,
        "api_key": None,
    },
    "supabase": {"url": None, "anon_key": None},
    "client": {
        "relay_base_url": CLIENT_DEFAULT_RELAY_BASE_URL,
        "voice": SPEECH_DEFAULT_VOICE,
        "voice_enabled": False,
        "max_pending_speech": CLIENT_MAX_PENDING_SPEECH,
    },
    "service": {
        "host": SERVICE_DEFAULT_HOST,
        "port": SERVICE_DEFAULT_PORT,
        "cors_origins": list(SERVICE_CORS_ORIGINS),
        "db_path": DEFAULT_DB_PATH,
    },
}

_TRUE = {"1", "true", "yes", "on"}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Lightweight .env loader.

    Parses KEY=VALUE lines, ignoring comments and blank lines. Existing
    environment variables win unless they hold a placeholder value.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("RELAY_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def _coerce(default: Any, raw: str) -> Any:
    """Convert an env string to the type of the field's default."""
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return default
    if isinstance(default, list):
        return [p.strip() for p in raw.split(",") if p.strip()]
    return raw


def _env_overrides(section: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = section.upper()
    for field, default in DEFAULTS.get(section, {}).items():
        val = os.getenv(f"{prefix}_{field.upper()}")
        if val is not None and not is_placeholder(val):
            out[field] = _coerce(default, val)
    return out


def get_section_config(section: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for ``section``.

    Merge order (later wins): defaults -> external config -> env vars ->
    aliased API key -> overrides. Unknown sections yield only what the file
    and overrides provide.
    """
    _load_dotenv_once()
    name = (section or "").lower().strip()
    cfg: Dict[str, Any] = copy.deepcopy(DEFAULTS.get(name, {}))

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if "api_key" in cfg and not cfg.get("api_key"):
        key, _ = resolve_key(name)
        if key:
            cfg["api_key"] = key

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def reset_config_cache() -> None:
    """Forget the cached config file and ``.env`` state (tests)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


__all__ = ["DEFAULTS", "get_section_config", "reset_config_cache"]
