"""
Pagination results and the single-pass page planner.

`plan` walks one ascending scan, holds one entry of lookahead, transforms the
entries that fall inside the window and derives the continuation cursor from
the last emitted key. It never counts the range in a second pass and never
restarts the scan.
"""

from collections.abc import Callable, Iterable, Iterator
from itertools import islice
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

from ._logging import logger, redact_key

D = TypeVar("D")
K = TypeVar("K")
V = TypeVar("V")
R = TypeVar("R", bound=BaseModel)

_EXHAUSTED: Any = object()


class PageResult(BaseModel, Generic[D, K]):
    """
    Represents a single page of results with pagination cursor.

    Attributes:
        data: Transformed entries of this page, in ascending key order
        next: Key of the last emitted entry, to pass as `start` of the next
            request (None if the keyspace is known to be exhausted)
        qty: Number of entries in this page, always equal to len(data)
    """

    model_config = ConfigDict(frozen=True)

    data: list[D]
    next: K | None = None
    qty: int

    @model_validator(mode="after")
    def _check_qty(self) -> "PageResult[D, K]":
        if self.qty != len(self.data):
            raise ValueError(f"qty ({self.qty}) must equal len(data) ({len(self.data)})")
        return self

    @property
    def has_more(self) -> bool:
        """Returns True if a follow-up request may return more entries."""
        return self.next is not None

    @classmethod
    def empty(cls) -> "PageResult[D, K]":
        return cls(data=[], next=None, qty=0)


def plan(
    open_scan: Callable[[], Iterable[tuple[K, V]]],
    limit: int,
    transform: Callable[[K, V], D],
    exact_next: bool = False,
) -> PageResult[D, K]:
    """
    Builds one page from a single ascending pass over a scan.

    Args:
        open_scan: Zero-argument factory opening the bounded scan. It is not
            called at all when `limit` is 0.
        limit: Effective page size
        transform: Called once per emitted entry, in key order. Never called
            on the lookahead entry.
        exact_next: Read one entry past the window and only return a cursor
            if it exists.

    Returns:
        PageResult whose `next` is the last emitted key when the window was
        filled (and, with `exact_next`, more data follows), else None.

    Raises:
        DecodeError, StoreAccessError: Propagated from the scan; no partial
            page is returned.
    """
    if limit == 0:
        logger.debug("Zero limit, skipping scan")
        return PageResult.empty()

    window = islice(open_scan(), limit + 1 if exact_next else limit)
    data: list[D] = []
    last_key: K | None = None

    held = next(window, _EXHAUSTED)
    while held is not _EXHAUSTED and len(data) < limit:
        key, value = held
        # Pull the lookahead before emitting the held entry
        held = next(window, _EXHAUSTED)
        data.append(transform(key, value))
        last_key = key

    filled = len(data) == limit
    if exact_next:
        cursor = last_key if filled and held is not _EXHAUSTED else None
    else:
        cursor = last_key if filled else None

    logger.debug(
        "Page planned",
        extra={
            "limit": limit,
            "qty": len(data),
            "has_next": cursor is not None,
            "next_hash": redact_key(cursor) if cursor is not None else None,
        },
    )
    return PageResult(data=data, next=cursor, qty=len(data))


def paginate(fetch: Callable[[R], PageResult[D, Any]], request: R) -> Iterator[D]:
    """
    Iterates through every item of a paginated operation, page by page.

    `fetch` receives a request and returns a PageResult. After each page the
    request is copied with `start` set to the page's `next`, until a page
    comes back without a cursor.

    Usage:
        items = paginate(
            lambda req: req.into_page(storage, BALANCES, lambda k, v: (k, v)),
            PageRequest(limit=20),
        )
    """
    while True:
        page = fetch(request)
        yield from page.data
        if page.next is None:
            return
        request = request.model_copy(update={"start": page.next})
