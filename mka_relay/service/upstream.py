"""Client for the upstream chat-completion gateway.

Purpose
-------
Open one streaming ``POST {base_url}/chat/completions`` per proxied request
with the configured model and system message prepended. The response is
returned unread so the proxy can pass the body through byte for byte.

Identity encoding is requested so the raw bytes forwarded to the caller are
already the plain event stream.

Failure modes
-------------
- Missing API key: :class:`UpstreamNotConfigured` before any network call.
- Transport failures: ``httpx.HTTPError`` propagates to the route.
- Non-2xx statuses are returned as-is; the route maps them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..base.http import get_async_client
from ..base.timeouts import get_timeout_config
from ..config import get_section_config


class UpstreamNotConfigured(RuntimeError):
    """Raised when no upstream API key is available."""


class UpstreamCompletionClient:
    """Streaming chat-completion calls against an OpenAI-compatible gateway."""

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str,
        model: str,
        system_message: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.system_message = system_message
        self._client = http_client

    @classmethod
    def from_config(cls, overrides: Optional[Dict[str, Any]] = None) -> "UpstreamCompletionClient":
        cfg = get_section_config("upstream", overrides)
        return cls(
            api_key=cfg.get("api_key"),
            base_url=cfg["base_url"],
            model=cfg["model"],
            system_message=cfg["system_message"],
        )

    def _http(self) -> httpx.AsyncClient:
        return self._client or get_async_client(None, "upstream")

    def build_payload(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        """Request body with the system message first and streaming enabled."""
        return {
            "model": self.model,
            "messages": [{"role": "system", "content": self.system_message}, *messages],
            "stream": True,
        }

    async def open_stream(self, messages: List[Dict[str, str]]) -> httpx.Response:
        """Send the completion request and return the unread streaming response.

        The caller owns the response and must ``aclose()`` it.
        """
        if not self.api_key:
            raise UpstreamNotConfigured("UPSTREAM_API_KEY is not configured")
        client = self._http()
        request = client.build_request(
            "POST",
            f"{self.base_url}/chat/completions",
            json=self.build_payload(messages),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Accept-Encoding": "identity",
            },
            timeout=get_timeout_config().for_stream(),
        )
        return await client.send(request, stream=True)


__all__ = ["UpstreamCompletionClient", "UpstreamNotConfigured"]
