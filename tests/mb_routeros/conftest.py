"""Shared fixtures: an in-process fake appliance speaking the API protocol."""

import contextlib
import socket
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, TypeAlias

import pytest

from mb_routeros.config import Config
from mb_routeros.errors import FrameTooLong
from mb_routeros.protocol.framing import SentenceReader, encode_sentence

# Maps one received sentence to the sentences sent back (None = stay silent).
Handler: TypeAlias = Callable[[list[str]], list[list[str]] | None]


class FakeRouter:
    """TCP server on localhost answering each received sentence through a handler.

    Connections are served one after another, so a session can reconnect.
    """

    def __init__(self, handler: Handler, *, chunk_size: int = 0) -> None:
        self.handler = handler
        self.chunk_size = chunk_size  # send replies in chunks of this many bytes (0 = all at once)
        self.received: list[list[str]] = []
        self.connections = 0
        self._server = socket.create_server(("127.0.0.1", 0))
        self._server.settimeout(5.0)
        self.port: int = self._server.getsockname()[1]
        self._conn: socket.socket | None = None
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        with contextlib.suppress(OSError):
            self._server.close()
        if self._conn is not None:
            # shutdown() wakes the serving thread blocked in recv(); close() alone does not.
            with contextlib.suppress(OSError):
                self._conn.shutdown(socket.SHUT_RDWR)
            with contextlib.suppress(OSError):
                self._conn.close()

    def _serve(self) -> None:
        while True:
            try:
                conn, _ = self._server.accept()
            except OSError:
                return
            self.connections += 1
            self._conn = conn
            with conn:
                self._serve_connection(conn)

    def _serve_connection(self, conn: socket.socket) -> None:
        reader = SentenceReader()
        while True:
            try:
                data = conn.recv(4096)
            except OSError:
                return
            if not data:
                return
            reader.feed(data)
            try:
                sentences = list(reader.sentences())
            except FrameTooLong:
                return  # not speaking the API protocol (e.g. a TLS ClientHello)
            for sentence in sentences:
                self.received.append(sentence)
                replies = self.handler(sentence)
                if replies is None:
                    continue
                payload = b"".join(encode_sentence(reply) for reply in replies)
                try:
                    self._send(conn, payload)
                except OSError:
                    return

    def _send(self, conn: socket.socket, payload: bytes) -> None:
        if not self.chunk_size:
            conn.sendall(payload)
            return
        for i in range(0, len(payload), self.chunk_size):
            conn.sendall(payload[i : i + self.chunk_size])


def appliance(sentence: list[str]) -> list[list[str]] | None:
    """Answer like an appliance with two interfaces."""
    match sentence:
        case ["/login", *_]:
            return [["!done"]]
        case ["/interface/print", *_]:
            return [["!re", "=name=ether1", "=running=true"], ["!re", "=name=ether2", "=running=false"], ["!done"]]
        case ["/system/identity/print"]:
            return [["!re", "=name=MikroTik"], ["!done"]]
        case ["/system/identity/set", *attrs]:
            return [["!re", *attrs], ["!done"]]
        case ["/interface/monitor-traffic", *_]:
            return [["!re", "=rx-bits-per-second=1000"], ["!re", "=rx-bits-per-second=2000"], ["!re"], ["!done"]]
        case ["/interface/remove", *_]:
            return [["!re", "=name=partial"], ["!trap", "=message=no such item"], ["!done"]]
        case ["/tool/torch", *_]:
            # Never terminates on its own, like a real torch session.
            return [["!re", f"=tx={n}"] for n in range(1, 4)]
        case ["/ip/address/print", *_]:
            return [["!empty"], ["!done"]]
        case ["/quit"]:
            return [["!fatal", "session terminated on request"]]
        case ["/slow"]:
            return None
        case _:
            return [["!trap", "=message=no such command"], ["!done"]]


@pytest.fixture
def fake_router() -> Iterator[Callable[..., FakeRouter]]:
    """Factory starting fake appliances; all are shut down after the test."""
    routers: list[FakeRouter] = []

    def start(handler: Handler = appliance, *, chunk_size: int = 0) -> FakeRouter:
        router = FakeRouter(handler, chunk_size=chunk_size)
        router.start()
        routers.append(router)
        return router

    yield start
    for router in routers:
        router.close()


@pytest.fixture
def config_for(tmp_path: Path) -> Callable[..., Config]:
    """Factory building a Config that points at a fake appliance, with short timeouts."""

    def build(router: FakeRouter, **kwargs: Any) -> Config:  # noqa: ANN401
        kwargs.setdefault("timeout", 2.0)
        kwargs.setdefault("probe_timeout", 0.5)
        return Config(data_dir=tmp_path, address="127.0.0.1", port=router.port, user="admin", password="secret", **kwargs)

    return build
