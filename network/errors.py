"""Failure taxonomy for remote calls.

Only NoConnectivityError sends a service down its offline branch; every
other NetworkError reaches the caller unchanged. Cancellation is plain
asyncio.CancelledError and is never wrapped.
"""
import asyncio
from enum import Enum


class ErrorKind(str, Enum):
    NO_CONNECTIVITY = "no_connectivity"
    UNAUTHORIZED = "unauthorized"
    SERVER_ERROR = "server_error"
    DECODE_ERROR = "decode_error"
    ENCODE_ERROR = "encode_error"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class NetworkError(Exception):
    kind = ErrorKind.UNKNOWN
    default_message = "Unknown error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NoConnectivityError(NetworkError):
    kind = ErrorKind.NO_CONNECTIVITY
    default_message = "No internet connection."


class UnauthorizedError(NetworkError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "You are not authorized."


class ServerError(NetworkError):
    kind = ErrorKind.SERVER_ERROR
    default_message = "Server error."

    def __init__(self, code: int, message: str | None = None):
        self.code = code
        super().__init__(message or f"Server error ({code}).")


class DecodeError(NetworkError):
    kind = ErrorKind.DECODE_ERROR
    default_message = "Could not decode the server response."


class EncodeError(NetworkError):
    kind = ErrorKind.ENCODE_ERROR
    default_message = "Could not encode the request data."


class UnknownNetworkError(NetworkError):
    kind = ErrorKind.UNKNOWN

    def __init__(self, cause: BaseException | None = None, message: str | None = None):
        self.cause = cause
        super().__init__(message or self.default_message)


def classify(exc: BaseException) -> ErrorKind:
    """Map any exception raised by a remote call onto the taxonomy."""
    if isinstance(exc, asyncio.CancelledError):
        return ErrorKind.CANCELLED
    if isinstance(exc, NetworkError):
        return exc.kind
    return ErrorKind.UNKNOWN
