"""Exception classes raised by the SDK."""

from typing import Any, Mapping, Optional

from common.constants import (
    ERR_ALREADY_EXISTS,
    ERR_EXPIRED_TOKEN,
    ERR_FILE_NOT_FOUND,
    ERR_FOLDER_NOT_FOUND,
    ERR_INVALID_FD,
    ERR_INVALID_TOKEN,
    ERR_LOGIN_FAILED,
    ERR_LOGIN_REQUIRED,
    ERR_PARENT_NOT_FOUND,
)


class SDKError(Exception):
    """
    Base exception class for all SDK errors.

    Attributes:
        method: Remote method the failing operation maps to, if any
        address: Address reference the operation targeted, if any
        code: Remote result code, or None when the error was raised locally
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        address: Any = None,
        code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.method = method
        self.address = address
        self.code = code

    def __str__(self) -> str:
        parts = [self.message]
        if self.method:
            parts.append(f"method={self.method}")
        if self.address is not None:
            parts.append(f"address={self.address!r}")
        if self.code is not None:
            parts.append(f"code={self.code}")
        return " ".join(parts)


class MisuseError(SDKError):
    """
    Raised when calling code uses the SDK incorrectly. Not retryable.
    """
    pass


class DescriptorClosedError(MisuseError):
    """
    Raised when a descriptor is used, or closed again, after close.
    """
    pass


class AddressError(MisuseError):
    """
    Raised for a malformed address reference, or one the operation does not accept.
    """
    pass


class UnsupportedOptionError(MisuseError):
    """
    Raised when a client option that must never be sent is applied.
    """
    pass


class APIError(SDKError):
    """
    Raised when the remote API replies with a non-zero result.
    """
    pass


class ConflictError(APIError):
    """
    Raised when the target already exists.
    """
    pass


class NotFoundError(APIError):
    """
    Raised when a file, folder or parent folder does not exist.
    """
    pass


class AuthenticationError(APIError):
    """
    Raised when the request is not, or could not be, authenticated.
    """
    pass


class InvalidArgumentError(APIError):
    """
    Raised for an invalid parameter. code is None when detected locally.
    """
    pass


class DescriptorInvalidError(APIError):
    """
    Raised when the remote side no longer recognises a file descriptor.
    """
    pass


class TransportError(SDKError):
    """
    Raised when the request could not be completed at the HTTP level.
    """
    pass


class OperationCancelledError(TransportError):
    """
    Raised when the call context was cancelled before the reply was used.
    """
    pass


class DeadlineExceededError(OperationCancelledError):
    """
    Raised when the call context deadline, or the request timeout, passed.
    """
    pass


EXCEPTION_MAP = {
    ERR_LOGIN_REQUIRED: AuthenticationError,
    ERR_LOGIN_FAILED: AuthenticationError,
    ERR_INVALID_TOKEN: AuthenticationError,
    ERR_EXPIRED_TOKEN: AuthenticationError,
    ERR_INVALID_FD: DescriptorInvalidError,
    ERR_ALREADY_EXISTS: ConflictError,
    ERR_PARENT_NOT_FOUND: NotFoundError,
    ERR_FOLDER_NOT_FOUND: NotFoundError,
    ERR_FILE_NOT_FOUND: NotFoundError,
}


def raise_for_result(method: str, reply: Mapping[str, Any], address: Any = None) -> None:
    """
    Raise the exception matching a reply's result code.

    Args:
        method: Remote method name
        reply: Decoded JSON reply
        address: Address reference the call targeted

    Raises:
        APIError: Or the subclass mapped from the result code
    """
    code = reply.get('result', 0)
    if code == 0:
        return

    exception = EXCEPTION_MAP.get(code)
    if exception is None:
        exception = InvalidArgumentError if 1000 <= code < 2000 else APIError

    raise exception(reply.get('error', 'Unknown error'), method=method, address=address, code=code)
