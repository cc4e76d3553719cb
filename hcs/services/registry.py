"""Registry submission.

This module provides:
- RegistryClient: Protocol for sending a signed envelope (injectable for tests)
- UrllibRegistryClient: Real implementation using urllib
- MockRegistryClient: Mock implementation recording what was sent
- submit(): interpretation of the registry's ``{body: {success, msg}}`` reply
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from hcs import __version__
from hcs.core.result import Err, Ok, Result
from hcs.core.structured import as_str_dict, get_table
from hcs.services.errors import SubmissionError, SubmissionRejected, SubmissionTransportError
from hcs.services.signing import SignedEnvelope

__all__ = [
    "HttpError",
    "RegistryClient",
    "UrllibRegistryClient",
    "MockRegistryClient",
    "submit",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class RegistryClient(Protocol):
    def post(self, envelope: SignedEnvelope) -> Result[object, HttpError]:
        """Send the envelope and return the decoded JSON reply."""
        ...


class UrllibRegistryClient:
    """Sends envelopes over HTTPS with the system certificate store."""

    def __init__(self, timeout: float = 30.0, user_agent: str = f"hcs-cli/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def post(self, envelope: SignedEnvelope) -> Result[object, HttpError]:
        url = envelope.url
        req = urllib.request.Request(
            url,
            data=envelope.body,
            headers={**envelope.headers, "User-Agent": self.user_agent},
            method=envelope.method,
        )
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        try:
            return Ok(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))


class MockRegistryClient:
    """Registry client returning a canned reply.

    Usage:
        client = MockRegistryClient({"body": {"success": True, "msg": "ok"}})
        submit(envelope, client)
        assert client.sent[0].body == envelope.body
    """

    def __init__(self, response: object | HttpError = None) -> None:
        self.response = response
        self.sent: list[SignedEnvelope] = []

    def post(self, envelope: SignedEnvelope) -> Result[object, HttpError]:
        self.sent.append(envelope)
        if isinstance(self.response, HttpError):
            return Err(self.response)
        return Ok(self.response)


def submit(envelope: SignedEnvelope, client: RegistryClient) -> Result[str, SubmissionError]:
    """Send the publish request and decide whether the release was accepted.

    Returns Ok(message) on acceptance.
    """
    reply = client.post(envelope)
    if isinstance(reply, Err):
        e = reply.error
        return Err(SubmissionTransportError(url=e.url, message=e.message, status=e.status))

    data = as_str_dict(reply.value)
    body = get_table(data, "body") if data is not None else None
    success = body.get("success") if body is not None else None
    if body is None or not isinstance(success, bool):
        return Err(
            SubmissionTransportError(url=envelope.url, message="unexpected response from the API")
        )

    msg = body.get("msg")
    message = msg if isinstance(msg, str) else ""
    if not success:
        return Err(SubmissionRejected(message or "the registry rejected the release"))
    return Ok(message)
