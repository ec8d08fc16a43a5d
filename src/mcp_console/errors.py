"""Error taxonomy shared by the client, the sync engine and the MCP tools."""


class ConsoleError(Exception):
    """Base for every failure raised by the console core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ConsoleError):
    """Malformed local request. Raised before any remote call is made."""


class TransportError(ConsoleError):
    """Network or HTTP-level failure talking to the console backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteError(ConsoleError):
    """The backend answered but reported ``success: false``."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
