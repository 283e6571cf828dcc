from __future__ import annotations

import io
import urllib.error
import urllib.request
from email.message import Message
from typing import Any

import pytest


class FakeResponse:
    """Stand-in for the object ``urlopen`` returns."""

    def __init__(self, body: bytes | str = b"", content_type: str = "", status: int = 200) -> None:
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self.status = status
        self.headers: dict[str, str] = {"Content-Type": content_type} if content_type else {}

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> bool:
        return False


class UnreadableBody(io.BytesIO):
    def read(self, *args: Any) -> bytes:  # noqa: D401
        raise AssertionError("error body must not be read")


def http_error(url: str, code: int, reason: str = "boom", fp: io.BytesIO | None = None) -> urllib.error.HTTPError:
    return urllib.error.HTTPError(url, code, reason, Message(), fp or io.BytesIO(b""))


class FakeUrlopen:
    """Records requests; answers from ``routes`` by URL, else from ``replies`` in order."""

    def __init__(self) -> None:
        self.requests: list[urllib.request.Request] = []
        self.timeouts: list[Any] = []
        self.replies: list[FakeResponse | BaseException] = []
        self.routes: dict[str, FakeResponse | BaseException] = {}

    def __call__(self, req: urllib.request.Request, timeout: Any = None, context: Any = None) -> FakeResponse:
        self.requests.append(req)
        self.timeouts.append(timeout)
        if req.full_url in self.routes:
            reply = self.routes[req.full_url]
        elif self.replies:
            reply = self.replies.pop(0)
        else:
            raise AssertionError(f"unexpected request to {req.full_url}")
        if isinstance(reply, BaseException):
            raise reply
        return reply

    @property
    def last(self) -> urllib.request.Request:
        return self.requests[-1]


@pytest.fixture()
def fake_urlopen(monkeypatch) -> FakeUrlopen:
    fake = FakeUrlopen()
    monkeypatch.setattr(urllib.request, "urlopen", fake)
    return fake


@pytest.fixture(autouse=True)
def _prod_environment(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
