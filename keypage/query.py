"""
Page requests over full maps and prefix views.

A request is a small, immutable value meant to travel across an API
boundary: an optional exclusive start key and an optional page size. It is
consumed by `into_page`, which resolves the lower bound, opens the scan and
hands it to the planner.
"""

from collections.abc import Callable, Iterator
from itertools import islice
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ._logging import logger
from .bound import resolve_start
from .config import PageOptions
from .map import KeyspaceView, Map
from .pagination import PageResult, plan
from .storage import Storage

K = TypeVar("K")
P = TypeVar("P")
S = TypeVar("S")
V = TypeVar("V")
D = TypeVar("D")

DEFAULT_OPTIONS = PageOptions()


def _page(
    view: KeyspaceView[K, V],
    storage: Storage,
    start: K | None,
    limit: int | None,
    transform: Callable[[K, V], D],
    options: PageOptions | None,
) -> PageResult[D, K]:
    opts = options or DEFAULT_OPTIONS
    effective = opts.effective_limit(limit)
    bound = resolve_start(start)

    logger.info(
        "Computing page",
        extra={
            "namespace": view.namespace,
            "has_start": start is not None,
            "limit": effective,
            "limit_overridden": limit is not None,
            "exact_next": opts.exact_next,
        },
    )

    result = plan(
        lambda: view.range(storage, min=bound),
        effective,
        transform,
        exact_next=opts.exact_next,
    )

    logger.info(
        "Page computed",
        extra={"namespace": view.namespace, "qty": result.qty, "has_next": result.has_more},
    )
    return result


def _keys(
    view: KeyspaceView[K, Any],
    storage: Storage,
    start: K | None,
    limit: int | None,
    options: PageOptions | None,
) -> Iterator[K]:
    effective = (options or DEFAULT_OPTIONS).effective_limit(limit)
    if effective == 0:
        return iter(())
    return islice(view.keys(storage, min=resolve_start(start)), effective)


class PageRequest(BaseModel, Generic[K]):
    """
    A page request over a whole map (or any other keyspace view).

    Attributes:
        start: Exclusive start key, usually the `next` of the previous page
        limit: Page size override. No ceiling applies: it may exceed the
            configured default.

    Usage:
        # First page
        page1 = PageRequest().into_page(storage, BALANCES, lambda k, v: {"id": k, "amount": v})

        # Next page
        if page1.has_more:
            page2 = PageRequest(start=page1.next, limit=15).into_page(storage, BALANCES, ...)
    """

    model_config = ConfigDict(frozen=True)

    start: K | None = None
    limit: int | None = Field(default=None, ge=0)

    def keys(
        self,
        storage: Storage,
        keyspace: KeyspaceView[K, Any],
        options: PageOptions | None = None,
    ) -> Iterator[K]:
        """Returns a lazy iterator over the keys of the requested window."""
        return _keys(keyspace, storage, self.start, self.limit, options)

    def into_page(
        self,
        storage: Storage,
        keyspace: KeyspaceView[K, V],
        transform: Callable[[K, V], D],
        options: PageOptions | None = None,
    ) -> PageResult[D, K]:
        """
        Computes the requested page in a single pass.

        Args:
            storage: Store to read from
            keyspace: Map (or view) to paginate over
            transform: Maps each emitted `(key, value)` to an output item
            options: Default limit and cursor policy (PageOptions() if omitted)

        Raises:
            EncodeError: If `start` cannot be encoded with the map's key codec
            DecodeError: If a stored key or value cannot be decoded
            StoreAccessError: If the store fails during the scan
        """
        return _page(keyspace, storage, self.start, self.limit, transform, options)


class PrefixPageRequest(BaseModel, Generic[P, S]):
    """
    A page request restricted to the entries of a composite-keyed map sharing `prefix`.

    `start` and the resulting `next` are suffixes: the prefix is fixed by the
    request and carries no information of its own.

    Usage:
        req = PrefixPageRequest(prefix=1, limit=20)
        page = req.into_page(storage, POSITIONS, lambda suffix, v: v)
    """

    model_config = ConfigDict(frozen=True)

    prefix: P
    start: S | None = None
    limit: int | None = Field(default=None, ge=0)

    def keys(
        self,
        storage: Storage,
        keyspace: Map[Any, Any],
        options: PageOptions | None = None,
    ) -> Iterator[S]:
        """Returns a lazy iterator over the suffixes of the requested window."""
        return _keys(keyspace.prefix(self.prefix), storage, self.start, self.limit, options)

    def into_page(
        self,
        storage: Storage,
        keyspace: Map[Any, V],
        transform: Callable[[S, V], D],
        options: PageOptions | None = None,
    ) -> PageResult[D, S]:
        """
        Computes the requested page over the prefix sub-range in a single pass.

        Raises:
            TypeError: If the map's keys are not composite
            EncodeError, DecodeError, StoreAccessError: As PageRequest.into_page
        """
        return _page(
            keyspace.prefix(self.prefix), storage, self.start, self.limit, transform, options
        )
