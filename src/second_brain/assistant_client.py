from typing import Optional

import httpx

DEFAULT_BASE_URL = "http://127.0.0.1:8000"


class AssistantClientError(RuntimeError):
    """Raised when the assistant endpoint cannot be reached or answers badly."""


class AssistantClient:
    """
    Minimal HTTP client for the assistant endpoint (`POST /api/ai`).

    Callable, so it can be handed to ChatTranscript as its `ask` function.
    Returns the `reply` field, or None when the response has no reply.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, *, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "AssistantClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def ask(self, prompt: str) -> Optional[str]:
        try:
            resp = self._client.post("/api/ai", json={"prompt": prompt})
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise AssistantClientError(f"Assistant request failed: {exc}") from exc
        if not isinstance(data, dict):
            raise AssistantClientError("Malformed response from assistant endpoint")
        reply = data.get("reply")
        return reply if isinstance(reply, str) else None

    __call__ = ask
