import os
from dataclasses import dataclass

DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class PageOptions:
    """
    Pagination settings applied when a request does not carry its own limit.

    The default limit is a convenience, not a ceiling: a request may ask for
    more entries than `default_limit` and will get them.

    Attributes:
        default_limit: Page size used when the request has no limit
        exact_next: When True, the planner reads one entry past the window and
            only returns a cursor if that entry exists. When False, a cursor is
            returned whenever the window is filled, which can lead to one
            trailing empty page.
    """

    default_limit: int = DEFAULT_LIMIT
    exact_next: bool = False

    def __post_init__(self) -> None:
        if self.default_limit < 0:
            raise ValueError(f"default_limit must be >= 0, got {self.default_limit}")

    def effective_limit(self, limit: int | None) -> int:
        """Returns the explicit limit verbatim, or the default when none was given."""
        return self.default_limit if limit is None else limit

    @classmethod
    def from_env(cls) -> "PageOptions":
        """
        Builds options from KEYPAGE_DEFAULT_LIMIT and KEYPAGE_EXACT_NEXT.
        Unset variables fall back to the dataclass defaults.
        """
        raw_limit = os.getenv("KEYPAGE_DEFAULT_LIMIT")
        raw_exact = os.getenv("KEYPAGE_EXACT_NEXT", "")
        return cls(
            default_limit=int(raw_limit) if raw_limit else DEFAULT_LIMIT,
            exact_next=raw_exact.strip().lower() in ("1", "true", "yes", "on"),
        )


@dataclass(frozen=True)
class StoreOptions:
    """
    Layout of a DynamoDB table used as an ordered key-value store.

    Every entry of one store lives in a single partition so that DynamoDB
    keeps them sorted by the binary sort key.
    """

    table_name: str
    partition: str = "keypage"
    pk_name: str = "pk"
    sk_name: str = "sk"
    value_name: str = "v"
    region: str = "us-east-1"
