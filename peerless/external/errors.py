from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER = "server"
    HTTP = "http"
    RESULT = "result"
    SESSION = "session"
    MALFORMED = "malformed"
    UNKNOWN = "unknown"


_KIND_BY_STATUS = {
    0: ErrorKind.CONNECTION,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    500: ErrorKind.SERVER,
}

_MESSAGE_BY_KIND = {
    ErrorKind.CONNECTION: "connection error",
    ErrorKind.AUTHENTICATION: "authentication failed: invalid username or password",
    ErrorKind.FORBIDDEN: "access forbidden: insufficient permissions",
    ErrorKind.NOT_FOUND: "RPC endpoint not found. Ensure Transmission is running",
    ErrorKind.CONFLICT: "session conflict: invalid session ID",
    ErrorKind.SERVER: "Transmission server error (500)",
    ErrorKind.UNKNOWN: "unknown error",
}


def kind_for_status(status_code: int) -> ErrorKind:
    try:
        return _KIND_BY_STATUS[status_code]
    except KeyError:
        if status_code >= 400:
            return ErrorKind.HTTP
        return ErrorKind.UNKNOWN


def message_for_status(status_code: int) -> str:
    kind = kind_for_status(status_code)
    if kind is ErrorKind.HTTP:
        return f"HTTP {status_code} error"
    return _MESSAGE_BY_KIND[kind]


class TransmissionError(Exception):
    """Failure talking to Transmission, always carrying where it happened."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        host: str,
        port: int,
        status_code: int = 0,
        cause: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.message = message
        self.host = host
        self.port = port
        self.status_code = status_code
        self.cause = cause
        super().__init__(str(self))

    def __str__(self):
        if self.cause is not None:
            return f"{self.message} at {self.host}:{self.port}: {self.cause}"
        return f"{self.message} at {self.host}:{self.port}"

    @property
    def is_auth_error(self) -> bool:
        return self.kind is ErrorKind.AUTHENTICATION

    @property
    def is_connection_error(self) -> bool:
        return self.kind is ErrorKind.CONNECTION


class TransportError(TransmissionError):
    """No usable response: the request never completed or the body was garbage."""

    @classmethod
    def connection(
        cls, host: str, port: int, cause: Optional[BaseException] = None
    ) -> "TransportError":
        return cls(
            ErrorKind.CONNECTION,
            message_for_status(0),
            host,
            port,
            status_code=0,
            cause=cause,
        )

    @classmethod
    def malformed(
        cls, host: str, port: int, status_code: int, cause: BaseException
    ) -> "TransportError":
        return cls(
            ErrorKind.MALFORMED,
            "failed to parse JSON response",
            host,
            port,
            status_code=status_code,
            cause=cause,
        )


class ProtocolError(TransmissionError):
    @classmethod
    def for_status(cls, status_code: int, host: str, port: int) -> "ProtocolError":
        return cls(
            kind_for_status(status_code),
            message_for_status(status_code),
            host,
            port,
            status_code=status_code,
        )

    @classmethod
    def for_result(
        cls, result: str, host: str, port: int, status_code: int = 200
    ) -> "ProtocolError":
        return cls(
            ErrorKind.RESULT,
            f"transmission returned: {result}",
            host,
            port,
            status_code=status_code,
        )


class SessionError(TransmissionError):
    @classmethod
    def missing_token(cls, host: str, port: int, status_code: int) -> "SessionError":
        return cls(
            ErrorKind.SESSION,
            "no session ID received from Transmission",
            host,
            port,
            status_code=status_code,
        )

    @classmethod
    def repeated_conflict(cls, host: str, port: int) -> "SessionError":
        return cls(
            ErrorKind.CONFLICT,
            message_for_status(409) + " (still rejected after retry)",
            host,
            port,
            status_code=409,
        )


def error_for_status(status_code: int, host: str, port: int) -> TransmissionError:
    if status_code == 0:
        return TransportError.connection(host, port)
    return ProtocolError.for_status(status_code, host, port)
