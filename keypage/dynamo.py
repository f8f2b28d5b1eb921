"""
DynamoDB-backed ordered storage.

All records of one store share a single partition, so a DynamoDB Query on
that partition returns them sorted by their binary range key. Range bounds
become key conditions on the range key.
"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import boto3

from ._logging import logger, redact_key
from .bound import RawBound
from .config import StoreOptions
from .exceptions import handle_store_errors
from .serializer import ItemSerializer
from .storage import Record


class DynamoStorage:
    """
    Storage implementation over a DynamoDB table with a (pk: S, sk: B) key schema.

    Usage:
        store = DynamoStorage(StoreOptions(table_name="entries", partition="balances"))
        BALANCES.save(store, "alice", 10)
    """

    _client_context: ContextVar[Any | None] = ContextVar("keypage_dynamo_client", default=None)

    def __init__(self, options: StoreOptions, client: Any | None = None) -> None:
        self.options = options
        self.serializer = ItemSerializer(options)
        self._client = client

    def _get_client(self) -> Any:
        """
        Returns the Boto3 DynamoDB client.

        A client scoped with `using_client` wins over the one given at
        construction; without either, a default client is created once.
        """
        ctx_client = self._client_context.get()
        if ctx_client is not None:
            return ctx_client

        if self._client is None:
            self._client = boto3.client("dynamodb", region_name=self.options.region)
        return self._client

    @classmethod
    @contextmanager
    def using_client(cls, client: Any) -> Generator[None, None, None]:
        """
        Context manager to scope a client to a block of code.
        Thread-safe and Async-safe using contextvars.

        Usage:
            with DynamoStorage.using_client(my_client):
                page = request.into_page(store, BALANCES, transform)
        """
        token = cls._client_context.set(client)
        try:
            yield
        finally:
            cls._client_context.reset(token)

    def get(self, key: bytes) -> bytes | None:
        table = self.options.table_name
        logger.debug(
            "Fetching record",
            extra={"table": table, "key_hash": redact_key(key), "operation": "get"},
        )

        with handle_store_errors(table_name=table):
            response = self._get_client().get_item(
                TableName=table, Key=self.serializer.key(key), ConsistentRead=True
            )

        if "Item" not in response:
            return None
        return self.serializer.from_item(response["Item"])[1]

    def set(self, key: bytes, value: bytes) -> None:
        table = self.options.table_name
        logger.debug(
            "Saving record",
            extra={"table": table, "key_hash": redact_key(key), "operation": "set"},
        )

        with handle_store_errors(table_name=table):
            self._get_client().put_item(TableName=table, Item=self.serializer.to_item(key, value))

    def remove(self, key: bytes) -> None:
        table = self.options.table_name
        logger.debug(
            "Removing record",
            extra={"table": table, "key_hash": redact_key(key), "operation": "remove"},
        )

        with handle_store_errors(table_name=table):
            self._get_client().delete_item(TableName=table, Key=self.serializer.key(key))

    def _query_kwargs(self, start: RawBound | None, end: RawBound | None) -> dict[str, Any]:
        """Translates raw bounds into Query arguments for the store partition."""
        key_expr = "#pk = :pk"
        names = {"#pk": self.options.pk_name}
        values = {":pk": self.serializer.to_dynamo_value(self.options.partition)}

        if start is not None and end is not None:
            # A key condition holds a single range-key clause, so both ends go
            # through BETWEEN and exclusive ends are dropped client-side.
            key_expr += " AND #sk BETWEEN :low AND :high"
            values[":low"] = self.serializer.to_dynamo_value(start.key)
            values[":high"] = self.serializer.to_dynamo_value(end.key)
        elif start is not None:
            key_expr += " AND #sk >= :low" if start.inclusive else " AND #sk > :low"
            values[":low"] = self.serializer.to_dynamo_value(start.key)
        elif end is not None:
            key_expr += " AND #sk <= :high" if end.inclusive else " AND #sk < :high"
            values[":high"] = self.serializer.to_dynamo_value(end.key)

        if start is not None or end is not None:
            names["#sk"] = self.options.sk_name

        return {
            "TableName": self.options.table_name,
            "KeyConditionExpression": key_expr,
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
            "ScanIndexForward": True,
            "ConsistentRead": True,
        }

    def range(self, start: RawBound | None, end: RawBound | None) -> Iterator[Record]:
        """
        Lazy ascending scan. The first Query is sent only when iteration starts,
        further pages are fetched as the caller keeps consuming.
        """
        if start is not None and end is not None and start.key > end.key:
            return iter(())
        return self._iter_range(start, end)

    def _iter_range(self, start: RawBound | None, end: RawBound | None) -> Iterator[Record]:
        kwargs = self._query_kwargs(start, end)
        table = self.options.table_name

        logger.debug(
            "Starting range query",
            extra={
                "table": table,
                "partition": self.options.partition,
                "has_start": start is not None,
                "has_end": end is not None,
            },
        )

        with handle_store_errors(table_name=table):
            paginator = self._get_client().get_paginator("query")
            for page in paginator.paginate(**kwargs):
                for item in page.get("Items", []):
                    key, value = self.serializer.from_item(item)
                    if start is not None and not start.admits_low(key):
                        continue
                    if end is not None and not end.admits_high(key):
                        continue
                    yield key, value
