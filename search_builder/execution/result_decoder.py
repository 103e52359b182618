"""
Aggregation reply decoding.

An `FT.AGGREGATE` reply is a flat array whose first element is the record
count. Every following element is one record, itself an array of alternating
field names and values:

    [2, ["documentType", "demo", "total", "15"], ["documentType", "other", "total", "3"]]

Records are delimited by their nested arrays, not by a fixed field count,
because records can carry different fields.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from search_builder.core.errors import ReplyFormatError

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


def _to_text(raw: Any) -> str:
    if isinstance(raw, bytes):
        return raw.decode(ENCODING)
    return str(raw)


class RecordValue:
    """
    A raw reply value, coerced only when read.

    Coercions never truncate: `as_int()` on "15.5" raises instead of returning 15.
    """

    __slots__ = ("raw",)

    def __init__(self, raw: Any):
        self.raw = raw

    @property
    def is_null(self) -> bool:
        return self.raw is None

    def as_str(self) -> Optional[str]:
        if self.raw is None:
            return None
        return _to_text(self.raw)

    def as_int(self) -> Optional[int]:
        if self.raw is None:
            return None
        if isinstance(self.raw, int) and not isinstance(self.raw, bool):
            return self.raw

        text = self.as_str()
        try:
            return int(text)
        except ValueError:
            pass

        # Decimal keeps every digit of "12345678901234567890.0"
        try:
            number = Decimal(text.strip())
        except InvalidOperation as e:
            raise ValueError(f"{text!r} is not a number") from e
        if not number.is_finite() or number != number.to_integral_value():
            raise ValueError(f"{text!r} is not an integral value")
        return int(number)

    def as_float(self) -> Optional[float]:
        if self.raw is None:
            return None
        return float(self.as_str())

    def as_list(self) -> List["RecordValue"]:
        """Elements of an array value, e.g. the output of TOLIST."""
        if not isinstance(self.raw, (list, tuple)):
            raise TypeError(f"Value is not an array: {self.raw!r}")
        return [RecordValue(item) for item in self.raw]

    def to_python(self) -> Any:
        """Plain Python form: str, None, or a list of those."""
        if isinstance(self.raw, (list, tuple)):
            return [item.to_python() for item in self.as_list()]
        return self.as_str()

    def __str__(self) -> str:
        return self.as_str() or ""

    def __int__(self) -> int:
        value = self.as_int()
        if value is None:
            raise TypeError("Cannot convert a null value to int")
        return value

    def __float__(self) -> float:
        value = self.as_float()
        if value is None:
            raise TypeError("Cannot convert a null value to float")
        return value

    def __repr__(self) -> str:
        return f"RecordValue({self.raw!r})"


class AggregateRecord:
    """
    One decoded record: ordered field names and their values.

    Lookup by name is case-sensitive and scans the record's fields.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Sequence[Tuple[str, RecordValue]]):
        self._fields = tuple(fields)

    def __getitem__(self, name: str) -> RecordValue:
        for field_name, value in self._fields:
            if field_name == name:
                return value
        raise KeyError(name)

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default

    def __contains__(self, name: object) -> bool:
        return any(field_name == name for field_name, _ in self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> List[str]:
        return [field_name for field_name, _ in self._fields]

    def items(self) -> List[Tuple[str, RecordValue]]:
        return list(self._fields)

    def to_dict(self) -> Dict[str, Any]:
        """Field names mapped to plain Python values."""
        return {field_name: value.to_python() for field_name, value in self._fields}

    def __repr__(self) -> str:
        return f"AggregateRecord({self.to_dict()!r})"


@dataclass(frozen=True)
class AggregateResult:
    """Decoded aggregation reply."""

    record_count: int
    records: Tuple[AggregateRecord, ...]
    raw_result: Any = None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[AggregateRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> AggregateRecord:
        return self.records[index]


class ResultDecoder:
    """
    Decodes raw aggregation replies into records.

    Stateless; every call is independent.
    """

    @classmethod
    def decode(cls, reply: Any) -> AggregateResult:
        """
        Decode an aggregation reply.

        Args:
            reply: Raw reply as returned by the transport

        Returns:
            AggregateResult with exactly the declared number of records

        Raises:
            ReplyFormatError: The reply does not have the expected shape
        """
        if not isinstance(reply, (list, tuple)) or not reply:
            raise ReplyFormatError(
                f"Expected a non-empty array reply, got {type(reply).__name__}"
            )

        declared = cls._parse_count(reply[0])
        rows = reply[1:]

        if len(rows) != declared:
            raise ReplyFormatError(
                f"Reply declares {declared} records but contains {len(rows)}"
            )

        records = tuple(cls._decode_record(index, row) for index, row in enumerate(rows))

        logger.debug("Decoded %d aggregate records", len(records))
        return AggregateResult(record_count=declared, records=records, raw_result=reply)

    @staticmethod
    def _parse_count(raw: Any) -> int:
        if isinstance(raw, bool):
            raise ReplyFormatError(f"Invalid record count: {raw!r}")
        if isinstance(raw, int):
            count = raw
        else:
            try:
                count = int(_to_text(raw))
            except (ValueError, UnicodeDecodeError) as e:
                raise ReplyFormatError(f"Invalid record count: {raw!r}") from e

        if count < 0:
            raise ReplyFormatError(f"Invalid record count: {count}")
        return count

    @staticmethod
    def _decode_record(index: int, row: Any) -> AggregateRecord:
        if not isinstance(row, (list, tuple)):
            raise ReplyFormatError(
                f"Record {index} is not a nested array; flattened replies have no record boundaries"
            )
        if len(row) % 2:
            raise ReplyFormatError(
                f"Record {index} has an odd number of name/value elements ({len(row)})"
            )

        fields = []
        for position in range(0, len(row), 2):
            name = row[position]
            if not isinstance(name, (str, bytes)):
                raise ReplyFormatError(
                    f"Record {index} has a non-string field name: {name!r}"
                )
            try:
                fields.append((_to_text(name), RecordValue(row[position + 1])))
            except UnicodeDecodeError as e:
                raise ReplyFormatError(
                    f"Record {index} has an undecodable field name: {name!r}"
                ) from e

        return AggregateRecord(fields)
