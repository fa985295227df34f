"""Remote validation: HTTP call and response interpretation.

An endpoint answers with a 200 response whose body is one of:
  - `1` / `true`            -> valid (invalid when inverted)
  - `0` / `false`           -> invalid
  - `{"success": ...}`      -> valid
  - `{"message": "..."}` or `{"error": "..."}` -> invalid, with that message
Anything else, or any other status code, is invalid.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http.client import HTTPException
from typing import Any, Mapping, Protocol
from urllib.error import HTTPError
from urllib.parse import urlencode, urljoin, urlparse
from urllib.request import Request, urlopen

from ..errors import InvalidConfigurationError, RemoteUnavailableError

logger = logging.getLogger(__name__)

_TRUE_BODIES = ("1", "true")
_FALSE_BODIES = ("0", "false")


class HttpCaller(Protocol):
    """Synchronous HTTP capability used by remote constraints."""

    def call(self, url: str, method: str, params: Mapping[str, Any], timeout: float) -> tuple[int, str]:
        """
        Perform the request and return (status_code, body).

        Raises:
            RemoteUnavailableError: the endpoint could not be reached
            OSError: raw connection errors are also treated as an outage
        """
        ...


class UrllibHttpCaller:
    """HttpCaller built on urllib (GET query string or form-encoded POST)."""

    def __init__(self, user_agent: str = "ZENVALIDATOR") -> None:
        self._user_agent = user_agent

    def call(self, url: str, method: str, params: Mapping[str, Any], timeout: float) -> tuple[int, str]:
        query = urlencode(params, doseq=True)
        data: bytes | None = None
        if method == "POST":
            data = query.encode("utf-8")
        elif query:
            url = f"{url}{'&' if '?' in url else '?'}{query}"

        req = Request(
            url,
            data=data,
            method=method,
            headers={
                "User-Agent": self._user_agent,
                "Accept": "application/json, text/plain, */*",
            },
        )
        if data is not None:
            req.add_header("Content-Type", "application/x-www-form-urlencoded")

        logger.debug("Remote validation %s %s", method, url)
        try:
            with urlopen(req, timeout=timeout) as resp:
                return resp.status, resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if e.fp is not None else ""
            return e.code, body
        except OSError as e:
            # URLError and socket timeouts are both OSError subclasses.
            reason = getattr(e, "reason", e)
            raise RemoteUnavailableError(f"Remote validation connection error: {reason}") from e
        except HTTPException as e:
            # Truncated or malformed responses (IncompleteRead, BadStatusLine).
            raise RemoteUnavailableError(f"Remote validation protocol error: {e!r}") from e


@dataclass(frozen=True)
class RemoteVerdict:
    passed: bool
    message: str | None = None


def resolve_url(url: str, base_url: str | None) -> str:
    """Make `url` absolute, using `base_url` for relative endpoints."""
    if urlparse(url).scheme:
        return url
    if not base_url:
        raise InvalidConfigurationError(f"Relative remote url {url!r} needs a base_url setting")
    return urljoin(base_url.rstrip("/") + "/", url.lstrip("/"))


def interpret_response(status: int, body: str, *, invert: bool = False) -> RemoteVerdict:
    """Map an endpoint response to a verdict; `invert` only turns a literal `1`/`true` into a failure."""
    if status != 200:
        return RemoteVerdict(passed=False)

    # Literal answers are case-sensitive: "TRUE" is not a valid answer.
    text = body.strip()
    if text in _TRUE_BODIES:
        return RemoteVerdict(passed=not invert)
    if text in _FALSE_BODIES:
        return RemoteVerdict(passed=False)

    try:
        payload = json.loads(text)
    except ValueError:
        return RemoteVerdict(passed=False)

    if not isinstance(payload, dict):
        return RemoteVerdict(passed=False)

    if payload.get("success") is not None:
        return RemoteVerdict(passed=True)

    for key in ("message", "error"):
        msg = payload.get(key)
        if msg is not None and str(msg).strip():
            return RemoteVerdict(passed=False, message=str(msg))

    return RemoteVerdict(passed=False)
