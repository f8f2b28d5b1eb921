from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError


class KeypageError(Exception):
    """Base exception for all keypage errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class EncodeError(KeypageError):
    """Raised when a key or value cannot be encoded to its raw representation."""

    def __init__(
        self, message: str, value: Any | None = None, original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)
        self.value = value


class DecodeError(KeypageError):
    """Raised when a stored key or value cannot be decoded into its logical type."""

    def __init__(
        self, message: str, raw: bytes | None = None, original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)
        self.raw = raw


class InvalidCursorError(DecodeError):
    """Raised when an opaque cursor token is not a valid encoded key."""

    def __init__(self, token: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Invalid cursor token '{token}'", original_error=original_error)
        self.token = token


class EntryNotFoundError(KeypageError):
    """Raised by strict loads when no entry is stored under the key."""

    def __init__(self, namespace: str, key: Any, original_error: Exception | None = None) -> None:
        super().__init__(f"No entry for key {key!r} in '{namespace}'", original_error)
        self.namespace = namespace
        self.key = key


class StoreAccessError(KeypageError):
    """Raised when the underlying store fails a lookup or a range scan."""


class TableNotFoundError(StoreAccessError):
    """Raised when the DynamoDB table backing a store does not exist."""

    def __init__(self, table_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Table '{table_name}' not found", original_error)
        self.table_name = table_name


class ThroughputExceededError(StoreAccessError):
    """Raised when the store throttles requests."""

    def __init__(
        self, message: str = "Request rate exceeded", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class RequestTimeoutError(StoreAccessError):
    """Raised when a request to the store times out."""

    def __init__(
        self, message: str = "Request timed out", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


@contextmanager
def handle_store_errors(table_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches botocore errors
    and raises the appropriate StoreAccessError subclass.

    Args:
        table_name: Optional table name for better error messages

    Usage:
        with handle_store_errors(table_name="entries"):
            client.query(...)
    """
    try:
        yield
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code == "ResourceNotFoundException":
            raise TableNotFoundError(table_name=table_name or "unknown", original_error=e) from e

        if error_code in (
            "ProvisionedThroughputExceededException",
            "ThrottlingException",
            "RequestLimitExceeded",
        ):
            raise ThroughputExceededError(message=error_message, original_error=e) from e

        if error_code in ("RequestTimeout", "RequestTimeoutException"):
            raise RequestTimeoutError(message=error_message, original_error=e) from e

        # Unknown error: wrap in generic StoreAccessError
        raise StoreAccessError(
            message=f"DynamoDB error ({error_code}): {error_message}", original_error=e
        ) from e
    except BotoCoreError as e:
        # Connection, endpoint and credential failures carry no error code
        raise StoreAccessError(message=f"DynamoDB client error: {e!s}", original_error=e) from e
