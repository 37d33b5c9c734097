"""Chat-completions API client.

Usage:
    client = CompletionClient(api_key="sk-xxx")
    text   = client.complete("Fix this snippet: <img src=\"a.png\" />")
"""

from typing import Any

import requests

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.2

SYSTEM_PROMPT = (
    "You are an expert in React accessibility. Provide minimal corrected code snippets."
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CompletionClientError(Exception):
    """Base exception for all completion client errors."""


class AuthenticationError(CompletionClientError):
    """Raised on HTTP 401 (invalid or revoked API key)."""


class NetworkError(CompletionClientError):
    """Raised on timeout, unreachable endpoint or any other transport failure."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CompletionClient:
    """Thin wrapper around an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        # None leaves the transport default in place (requests: wait forever)
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type":  "application/json",
            "Authorization": f"Bearer {api_key}",
        })

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def complete(self, prompt: str, system_prompt: str = SYSTEM_PROMPT) -> str:
        """Send one chat request and return the first choice's content.

        Returns an empty string when the response carries no content.

        Raises:
            AuthenticationError:   HTTP 401
            CompletionClientError: Any other non-2xx response
            NetworkError:          Timeout, connection or other transport failure
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user",   "content": prompt},
            ],
            "max_tokens":  self.max_tokens,
            "temperature": self.temperature,
        }
        data = self._request(payload)
        return _first_content(data)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "CompletionClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, payload: dict[str, Any]) -> Any:
        try:
            response = self._session.post(self.endpoint, json=payload, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{self.endpoint}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach completion service at '{self.endpoint}'"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise NetworkError(
                f"Request to '{self.endpoint}' failed: {exc.__class__.__name__}: {exc}"
            ) from exc

        if response.status_code == 401:
            raise AuthenticationError(
                f"OpenAI API error: {response.status_code} {response.reason} "
                "(check that OPENAI_API_KEY is valid)"
            )
        if not response.ok:
            raise CompletionClientError(
                f"OpenAI API error: {response.status_code} {response.reason}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise CompletionClientError(
                f"OpenAI API returned a non-JSON body: {response.text[:200]}"
            ) from exc


def _first_content(data: Any) -> str:
    """Return ``choices[0].message.content`` or "" if it is missing or not a string."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""
