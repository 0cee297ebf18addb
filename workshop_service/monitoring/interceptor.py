"""ASGI `send` facade that remembers the response status."""

from __future__ import annotations

from http import HTTPStatus

from starlette.types import Message, Send


def status_text(code: int) -> str:
    """HTTP reason phrase for *code* ("OK", "Bad Request", ...)."""
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return str(code)


class ResponseInterceptor:
    """
    Wraps one request's `send` callable.

    Every message is forwarded untouched and unbuffered.  The status of the
    ``http.response.start`` message is captured on the way through; if the
    wrapped app never sends one, *status_code* keeps its initial 200.
    """

    def __init__(self, send: Send, default_status: int = HTTPStatus.OK):
        self._send = send
        self.status_code: int = int(default_status)
        self.started = False

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = int(message["status"])
            self.started = True
        await self._send(message)

    @property
    def status_text(self) -> str:
        return status_text(self.status_code)
