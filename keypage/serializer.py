from typing import Any, Generic, TypeVar, cast

from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from .config import StoreOptions
from .exceptions import DecodeError, EncodeError

V = TypeVar("V")


class ValueSerializer(Generic[V]):
    """
    Converts stored values between their Python type and raw JSON bytes.

    Architectural Note:
    -------------------
    Validation goes through a Pydantic TypeAdapter, so any type Pydantic can
    validate (models, dataclasses, builtins, unions) can be stored, and a value
    read back is checked against the declared type. A stored payload that no
    longer validates is a DecodeError, not a silently partial value.
    """

    def __init__(self, value_type: type[V] | Any) -> None:
        self.value_type = value_type
        self._adapter: TypeAdapter[V] = TypeAdapter(value_type)

    def dumps(self, value: V) -> bytes:
        try:
            validated = self._adapter.validate_python(value)
        except PydanticValidationError as e:
            raise EncodeError(
                f"Value {value!r} does not match {self.value_type!r}. error={e!s}",
                value=value,
                original_error=e,
            ) from e
        try:
            return self._adapter.dump_json(validated)
        except PydanticSerializationError as e:
            raise EncodeError(
                f"Failed to serialize value {value!r}. error={e!s}", value=value, original_error=e
            ) from e

    def loads(self, raw: bytes) -> V:
        try:
            return self._adapter.validate_json(raw)
        except PydanticValidationError as e:
            raise DecodeError(
                f"Stored value does not match {self.value_type!r}. error={e!s}",
                raw=raw,
                original_error=e,
            ) from e


class ItemSerializer:
    """
    Handles the conversion between raw store records and DynamoDB Low-Level format.

    Each record is one item: the store partition as the hash key, the encoded
    key as the binary range key and the encoded value as a binary attribute.
    DynamoDB orders binary range keys by unsigned bytes, which matches the
    order of the key codecs.
    """

    def __init__(self, options: StoreOptions) -> None:
        self.options = options
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def to_dynamo_value(self, value: Any) -> dict[str, Any]:
        """
        Serializes a single value to DynamoDB format.
        E.g.: b"\\x01" -> {'B': b'\\x01'}
        """
        try:
            return cast(dict[str, Any], self._serializer.serialize(value))
        except TypeError as e:
            raise EncodeError(
                f"Failed to serialize value '{value!r}'. error={e!s}", value=value, original_error=e
            ) from e

    def key(self, raw_key: bytes) -> dict[str, dict[str, Any]]:
        """Builds the primary key of the item that holds `raw_key`."""
        return {
            self.options.pk_name: self.to_dynamo_value(self.options.partition),
            self.options.sk_name: self.to_dynamo_value(raw_key),
        }

    def to_item(self, raw_key: bytes, raw_value: bytes) -> dict[str, dict[str, Any]]:
        item = self.key(raw_key)
        item[self.options.value_name] = self.to_dynamo_value(raw_value)
        return item

    def from_item(self, item: dict[str, Any]) -> tuple[bytes, bytes]:
        """Converts a DynamoDB item back to a `(raw_key, raw_value)` record."""
        try:
            raw_key = self._deserializer.deserialize(item[self.options.sk_name])
            raw_value = self._deserializer.deserialize(item[self.options.value_name])
        except (KeyError, TypeError) as e:
            raise DecodeError(
                f"Malformed item in table '{self.options.table_name}'. error={e!s}",
                original_error=e,
            ) from e
        return self._to_bytes(raw_key), self._to_bytes(raw_value)

    def _to_bytes(self, value: Any) -> bytes:
        if isinstance(value, Binary):
            return bytes(value.value)
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        raise DecodeError(f"Expected a binary attribute, got {type(value).__name__}")
