"""Synchronous session with an appliance over the binary API protocol.

One session owns one TCP (or TLS) connection. The protocol carries no
per-command correlation id, so replies are matched to commands purely by
arrival order: every exchange holds the session lock until the command's
terminating sentence has been read.
"""

from __future__ import annotations

import contextlib
import logging
import socket
import ssl
import threading
from collections.abc import Iterator, Sequence
from enum import StrEnum
from types import TracebackType
from typing import Self

from mb_routeros.config import Config
from mb_routeros.errors import (
    ApiError,
    ApiTimeout,
    AuthFailed,
    CommandFailed,
    ConnectFailed,
    ConnectionLost,
    FatalError,
    FrameTooLong,
    ProtocolStateError,
    SessionBusy,
)
from mb_routeros.log import mask_word
from mb_routeros.protocol.command import Batch, Command, Request, Single
from mb_routeros.protocol.framing import SentenceReader, encode_sentence
from mb_routeros.protocol.reply import Reply, ReplyKind, Row, interpret

logger = logging.getLogger(__name__)

# Read buffer size
_BUFSIZE = 65536

PROBE_COMMAND = Command.from_words(["/system/identity/print"])


class SessionState(StrEnum):
    """Lifecycle of a session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    CLOSED = "closed"


class StreamOutcome(StrEnum):
    """How a RowStream ended."""

    RUNNING = "running"
    DONE = "done"
    TRAPPED = "trapped"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Session:
    """Client connection to one appliance."""

    def __init__(self, cfg: Config) -> None:
        """Initialize a disconnected session.

        Args:
            cfg: Connection parameters (address, credentials, TLS, timeouts).

        """
        self._cfg = cfg
        self._sock: socket.socket | None = None
        self._reader = SentenceReader()
        self._state = SessionState.DISCONNECTED
        self._lock = threading.Lock()  # held for the whole lifetime of one command exchange
        self._stream: RowStream | None = None  # started stream holding the lock
        # verbose raises protocol traffic from DEBUG to INFO
        self._traffic_level = logging.INFO if cfg.verbose else logging.DEBUG

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_ready(self) -> bool:
        """True once login has succeeded and until the session is closed."""
        return self._state is SessionState.READY

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None) -> None:
        self.close()

    # --- Lifecycle ---

    def connect(self) -> None:
        """Open the transport and log in.

        Raises:
            ProtocolStateError: Session is already connected.
            ConnectFailed: TCP connect or TLS handshake failed.
            AuthFailed: Appliance rejected the credentials.

        """
        if self._state in (SessionState.CONNECTING, SessionState.AUTHENTICATING, SessionState.READY):
            msg = f"Session is already {self._state}."
            raise ProtocolStateError(msg)

        self._reader.clear()
        self._state = SessionState.CONNECTING
        try:
            self._sock = self._open_socket()
        except ApiError:
            self._state = SessionState.CLOSED
            raise
        logger.info("API socket connection opened to %s:%d.", self._cfg.address, self._cfg.api_port)

        self._state = SessionState.AUTHENTICATING
        try:
            with self._exchange(require_ready=False):
                self._login()
        except ApiError:
            self.close()
            raise
        self._state = SessionState.READY

    def login(self) -> bool:
        """Connect and log in, reporting failure as False instead of raising."""
        try:
            self.connect()
        except ApiError as e:
            logger.warning("Login failed: %s", e)
            return False
        return True

    def close(self) -> None:
        """Release the transport and drop buffered bytes. Safe to call repeatedly.

        A suspended stream is cancelled so that it gives the command lock back.
        """
        stream, self._stream = self._stream, None
        if stream is not None:
            stream._cancel()  # noqa: SLF001
        sock, self._sock = self._sock, None
        self._reader.clear()
        if sock is not None:
            # shutdown() wakes a reader blocked in recv() on another thread
            with contextlib.suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)
            with contextlib.suppress(OSError):
                sock.close()
            logger.info("API socket connection closed.")
        if self._state is not SessionState.DISCONNECTED:
            self._state = SessionState.CLOSED

    # --- Commands ---

    def execute(self, command: Command) -> list[Row]:
        """Send a command and return the rows of all its !re sentences.

        Raises:
            CommandFailed: Appliance answered with !trap; rows received before it are discarded.
            ProtocolStateError: Session is not ready or another command is in flight.

        """
        with self._exchange():
            return self._run(command)

    def talk(self, request: Request) -> list[Row]:
        """Execute a single command or a batch of commands, concatenating their rows.

        The first failing command aborts the batch.
        """
        match request:
            case Single(command=command):
                return self.execute(command)
            case Batch(commands=commands):
                rows: list[Row] = []
                for command in commands:
                    rows.extend(self.execute(command))
                return rows

    def stream(self, command: Command) -> RowStream:
        """Return a lazy stream of rows; the command is sent on first iteration.

        Raises:
            ProtocolStateError: Session is not ready.

        """
        self._require_ready()
        return RowStream(self, command)

    def probe(self) -> bool:
        """Check the appliance answers a trivial command within the probe deadline.

        A session busy with another command is reported as not alive and left
        open, since the running exchange owns the transport. Any other failure
        closes the session.
        """
        if not self.is_ready:
            logger.info("Probe on a session that is not ready.")
            return False
        try:
            with self._exchange(wait=self._cfg.probe_timeout):
                sock = self._require_socket()
                sock.settimeout(self._cfg.probe_timeout)
                try:
                    self._run(PROBE_COMMAND)
                finally:
                    if self._sock is not None:
                        self._sock.settimeout(self._cfg.timeout)
        except SessionBusy:
            logger.info("Probe skipped: another command is in flight.")
            return False
        except ApiError as e:
            logger.info("Socket is closed or appliance does not respond: %s", e)
            self.close()
            return False
        return True

    # --- Internals ---

    def _open_socket(self) -> socket.socket:
        """Open the TCP connection, with TLS on top if configured."""
        host, port = self._cfg.address, self._cfg.api_port
        try:
            sock = socket.create_connection((host, port), timeout=self._cfg.timeout)
        except OSError as e:
            raise ConnectFailed(host, port, str(e)) from e
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            if self._cfg.use_tls:
                sock = self._tls_context().wrap_socket(sock, server_hostname=host)
        except OSError as e:
            sock.close()
            raise ConnectFailed(host, port, str(e)) from e
        return sock

    def _tls_context(self) -> ssl.SSLContext:
        cafile = str(self._cfg.tls_ca_file) if self._cfg.tls_ca_file is not None else None
        context = ssl.create_default_context(cafile=cafile)
        if not self._cfg.tls_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _login(self) -> None:
        self._send(["/login", f"=name={self._cfg.user}", f"=password={self._cfg.password}"])
        reply = self._read_reply()
        if reply.kind is ReplyKind.TRAP:
            raise AuthFailed(reply.message)
        if reply.kind is not ReplyKind.DONE:
            msg = f"Unexpected reply to login: {reply.kind or 'no control word'}."
            raise AuthFailed(msg)
        if reply.legacy_ret is not None:
            logger.info("Appliance answered login with ret=; using old login process.")
        else:
            logger.info("Logged in as %s.", self._cfg.user)

    @contextlib.contextmanager
    def _exchange(self, *, require_ready: bool = True, wait: float | None = None) -> Iterator[None]:
        """Hold the command lock; close the session on transport or framing failure or interruption.

        The lock is awaited for ``wait`` seconds, by default the session timeout.
        """
        if require_ready:
            self._require_ready()
        if wait is None:
            wait = self._cfg.timeout if self._cfg.timeout is not None else -1
        if not self._lock.acquire(timeout=wait):
            msg = "Another command is in flight on this session."
            raise SessionBusy(msg)
        try:
            yield
        except TimeoutError as e:
            self.close()
            msg = f"No reply from {self._cfg.address} within the deadline."
            raise ApiTimeout(msg) from e
        except OSError as e:
            self.close()
            raise ConnectionLost(str(e)) from e
        except (FrameTooLong, FatalError, ConnectionLost):
            self.close()
            raise
        except ApiError:
            raise
        except BaseException:
            # Interrupted mid-reply: the rest of it would be read as the next command's answer.
            self.close()
            raise
        finally:
            self._lock.release()

    def _run(self, command: Command) -> list[Row]:
        """Send a command and collect rows until its terminator. Caller holds the lock."""
        self._send(command.words)
        rows: list[Row] = []
        while True:
            reply = self._read_reply()
            match reply.kind:
                case ReplyKind.RE:
                    if (row := reply.row) is not None:
                        rows.append(row)
                case ReplyKind.DONE:
                    return rows
                case ReplyKind.TRAP:
                    self._drain_to_done()
                    raise CommandFailed(str(command), reply.message)
                case _:
                    logger.debug("Skipping %s sentence.", reply.kind or "unclassified")

    def _drain_to_done(self) -> None:
        """Read up to the !done that closes a trapped command."""
        while self._read_reply().kind is not ReplyKind.DONE:
            pass

    def _send(self, words: Sequence[str]) -> None:
        sock = self._require_socket()
        data = encode_sentence(words)
        for word in words:
            logger.log(self._traffic_level, ">>> %s", mask_word(word))
        sock.sendall(data)

    def _read_reply(self) -> Reply:
        """Block until the next complete sentence has arrived and classify it.

        Raises:
            ConnectionLost: Peer closed the connection.
            FatalError: Appliance sent !fatal.

        """
        sock = self._require_socket()
        while (sentence := self._reader.next_sentence()) is None:
            data = sock.recv(_BUFSIZE)
            if not data:
                msg = "Connection closed by appliance."
                raise ConnectionLost(msg)
            self._reader.feed(data)
        for word in sentence:
            logger.log(self._traffic_level, "<<< %s", word)
        reply = interpret(sentence)
        if reply.kind is ReplyKind.FATAL:
            raise FatalError(reply.message)
        return reply

    def _require_ready(self) -> None:
        if not self.is_ready:
            msg = f"Session is {self._state}; connect first."
            raise ProtocolStateError(msg)

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            msg = "Socket is not open."
            raise ProtocolStateError(msg)
        return self._sock


class RowStream:
    """Lazy, non-restartable rows of one streamed command.

    Iteration ends on !done (outcome DONE) or !trap (outcome TRAPPED, with the
    CommandFailed in ``error``). Closing the stream before that cancels it:
    the command never reached its terminator, so the session is closed too.
    Transport failures propagate from next() and leave outcome FAILED.
    """

    def __init__(self, session: Session, command: Command) -> None:
        self._session = session
        self._command = command
        self._started = False
        self._rows = self._iterate()
        self.outcome = StreamOutcome.RUNNING
        self.error: ApiError | None = None

    @property
    def command(self) -> Command:
        """Command being streamed."""
        return self._command

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> Row:
        return next(self._rows)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None) -> None:
        self.close()

    def close(self) -> None:
        """Stop iterating; closes the session if the command is still running."""
        if self._started:
            self._rows.close()
        elif self.outcome is StreamOutcome.RUNNING:
            self.outcome = StreamOutcome.CANCELLED

    def _cancel(self) -> None:
        """Cancel on behalf of Session.close(); a no-op while the stream is mid-read."""
        if not self._rows.gi_running:
            self._rows.close()

    def _iterate(self) -> Iterator[Row]:
        session = self._session
        if self.outcome is not StreamOutcome.RUNNING:
            return
        self._started = True
        try:
            with session._exchange():  # noqa: SLF001
                session._stream = self  # noqa: SLF001
                session._send(self._command.words)  # noqa: SLF001
                while True:
                    reply = session._read_reply()  # noqa: SLF001
                    match reply.kind:
                        case ReplyKind.RE:
                            if (row := reply.row) is not None:
                                yield row
                        case ReplyKind.DONE:
                            self.outcome = StreamOutcome.DONE
                            return
                        case ReplyKind.TRAP:
                            self.error = reply.failure(str(self._command))
                            self.outcome = StreamOutcome.TRAPPED
                            logger.info("Stream of '%s' ended with trap: %s", self._command, reply.message)
                            session._drain_to_done()  # noqa: SLF001
                            return
                        case _:
                            logger.debug("Skipping %s sentence.", reply.kind or "unclassified")
        except GeneratorExit:
            self.outcome = StreamOutcome.CANCELLED
            logger.info("Stream of '%s' cancelled before its terminator; closing session.", self._command)
            session.close()
            raise
        except ApiError as e:
            if self.outcome is StreamOutcome.RUNNING:
                self.outcome = StreamOutcome.FAILED
                self.error = e
            raise
        finally:
            if session._stream is self:  # noqa: SLF001
                session._stream = None  # noqa: SLF001
