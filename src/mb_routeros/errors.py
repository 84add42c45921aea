"""Error taxonomy for the API client."""


class ApiError(Exception):
    """Base error raised by protocol and session operations."""

    def __init__(self, code: str, message: str) -> None:
        """Initialize with a machine-readable code and a human-readable message.

        Args:
            code: Machine-readable error code (e.g. "auth_failed").
            message: Human-readable error description.

        """
        super().__init__(message)
        self.code = code


class ConnectFailed(ApiError):
    """Transport could not be opened (TCP connect or TLS handshake)."""

    def __init__(self, host: str, port: int, detail: str) -> None:
        super().__init__("connect_failed", f"Failed to connect to {host}:{port}: {detail}")
        self.host = host
        self.port = port
        self.detail = detail


class FrameTooLong(ApiError):
    """Word length outside the 32-bit range or an unknown length prefix."""

    def __init__(self, message: str) -> None:
        super().__init__("frame_too_long", message)


class AuthFailed(ApiError):
    """Appliance rejected the login sentence."""

    def __init__(self, message: str) -> None:
        super().__init__("auth_failed", f"Login failed: {message}")
        self.reason = message


class CommandFailed(ApiError):
    """Appliance answered a command with !trap."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__("command_failed", f"Command '{command}' failed: {message}")
        self.command = command
        self.reason = message


class FatalError(ApiError):
    """Appliance sent !fatal; the connection is gone."""

    def __init__(self, message: str) -> None:
        super().__init__("fatal", f"Session terminated by appliance: {message}")
        self.reason = message


class ProtocolStateError(ApiError):
    """Operation not allowed in the current session state."""

    def __init__(self, message: str) -> None:
        super().__init__("protocol_state", message)


class ApiTimeout(ApiError):
    """No reply within the session deadline."""

    def __init__(self, message: str) -> None:
        super().__init__("timeout", message)


class ConnectionLost(ApiError):
    """Transport failed or the peer closed it mid-exchange."""

    def __init__(self, message: str) -> None:
        super().__init__("connection_lost", message)


class SessionBusy(ProtocolStateError):
    """Another command still holds the session."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.code = "busy"
