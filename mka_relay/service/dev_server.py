from __future__ import annotations

import os

import uvicorn

from ..config import get_section_config


def main() -> None:
    """Start the development server for the relay proxy.

    Host and port come from the ``service`` config section (``SERVICE_HOST``,
    ``SERVICE_PORT``). ``SERVICE_RELOAD=false`` disables auto-reload.
    """
    cfg = get_section_config("service")
    reload_env = os.getenv("SERVICE_RELOAD")
    reload_enabled = True if reload_env is None else reload_env.lower() == "true"

    uvicorn.run(
        "mka_relay.service.app:app",
        host=cfg["host"],
        port=int(cfg["port"]),
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
