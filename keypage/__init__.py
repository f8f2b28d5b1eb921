from .bound import Bound, RawBound, resolve_start
from .config import DEFAULT_LIMIT, PageOptions, StoreOptions
from .cursor import decode_cursor, encode_cursor
from .dynamo import DynamoStorage
from .exceptions import (
    DecodeError,
    EncodeError,
    EntryNotFoundError,
    InvalidCursorError,
    KeypageError,
    RequestTimeoutError,
    StoreAccessError,
    TableNotFoundError,
    ThroughputExceededError,
)
from .keys import Bytes, Composite, Int, KeyCodec, Str, Uint
from .map import KeyspaceView, Map, Prefix
from .pagination import PageResult, paginate, plan
from .query import PageRequest, PrefixPageRequest
from .storage import MemoryStorage, Storage

__all__ = [
    # Requests & results
    "PageRequest",
    "PrefixPageRequest",
    "PageResult",
    "PageOptions",
    "DEFAULT_LIMIT",
    "plan",
    "paginate",
    # Cursors & bounds
    "encode_cursor",
    "decode_cursor",
    "Bound",
    "RawBound",
    "resolve_start",
    # Keys
    "KeyCodec",
    "Uint",
    "Int",
    "Str",
    "Bytes",
    "Composite",
    # Maps & storage
    "Map",
    "Prefix",
    "KeyspaceView",
    "Storage",
    "MemoryStorage",
    "DynamoStorage",
    "StoreOptions",
    # Exceptions
    "KeypageError",
    "EncodeError",
    "DecodeError",
    "InvalidCursorError",
    "EntryNotFoundError",
    "StoreAccessError",
    "TableNotFoundError",
    "ThroughputExceededError",
    "RequestTimeoutError",
]
