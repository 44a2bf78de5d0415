"""HTTP utilities (shared async client pool)."""

from .client import aclose_all_clients, get_async_client

__all__ = ["get_async_client", "aclose_all_clients"]
