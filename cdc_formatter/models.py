"""Data models for CDC operations and formatted output."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pyarrow as pa


class OpType(str, Enum):
    """Row-level operation type as seen by the formatter."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    PK_UPDATE = "pk_update"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "OpType":
        op_map = {
            "I": cls.INSERT,
            "INSERT": cls.INSERT,
            "U": cls.UPDATE,
            "UPDATE": cls.UPDATE,
            "D": cls.DELETE,
            "DELETE": cls.DELETE,
            "PK": cls.PK_UPDATE,
            "PK_UPDATE": cls.PK_UPDATE,
        }
        return op_map.get((code or "").upper(), cls.UNKNOWN)


class Side(str, Enum):
    """Which image of a row a block is built from."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class ColumnMeta:
    """Column descriptor from the table metadata."""

    name: str
    sql_type: int
    is_key: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "ColumnMeta":
        return cls(
            name=data["name"],
            sql_type=int(data.get("type", 12)),
            is_key=bool(data.get("key", False)),
        )


@dataclass(frozen=True)
class TableMetadata:
    """Ordered column descriptors for one table."""

    name: str
    columns: Tuple[ColumnMeta, ...]

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def key_columns(self) -> List[str]:
        return [col.name for col in self.columns if col.is_key]

    @classmethod
    def from_dict(cls, data: dict) -> "TableMetadata":
        return cls(
            name=data["table"],
            columns=tuple(ColumnMeta.from_dict(c) for c in data.get("columns", [])),
        )


@dataclass(frozen=True)
class ColumnValue:
    """A captured column image; ``value`` of None means explicit SQL null."""

    value: Optional[str]

    @property
    def is_null(self) -> bool:
        return self.value is None


@dataclass(frozen=True)
class ColumnChange:
    """Before and after images of one column, either of which may be absent."""

    before: Optional[ColumnValue] = None
    after: Optional[ColumnValue] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ColumnChange":
        # A missing key means the image was not captured; JSON null is an explicit null.
        return cls(
            before=ColumnValue(_as_raw(data["before"])) if "before" in data else None,
            after=ColumnValue(_as_raw(data["after"])) if "after" in data else None,
        )


def _as_raw(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class ChangeOperation:
    """One captured row change, consumed once by the formatter."""

    op_type: OpType
    table: str
    columns: Tuple[ColumnChange, ...]
    op_ts: str
    position: str
    tokens: Dict[str, str] = field(default_factory=dict)
    op_code: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeOperation":
        """Parse an operation from its JSON line representation."""
        op_code = str(data.get("op_type", ""))
        return cls(
            op_type=OpType.from_code(op_code),
            table=data["table"],
            columns=tuple(ColumnChange.from_dict(c) for c in data.get("columns", [])),
            op_ts=str(data.get("op_ts", "")),
            position=str(data.get("pos", "")),
            tokens={str(k): str(v) for k, v in (data.get("tokens") or {}).items()},
            op_code=op_code,
        )


@dataclass(frozen=True)
class SourceInfo:
    """Streaming-offset bookkeeping placeholders carried on every record."""

    entity: str
    snapshot_lastone: bool = False
    is_increment: bool = True
    total_size: int = 0
    index: int = 0

    def to_dict(self) -> dict:
        return {
            "entity": self.entity,
            "snapshot_lastone": self.snapshot_lastone,
            "is_increment": self.is_increment,
            "total_size": self.total_size,
            "index": self.index,
        }


@dataclass
class OutputRecord:
    """Formatted value record: metadata, source block and one payload block."""

    table: str
    op_type: str
    op_ts: str
    current_ts: str
    pos: str
    source: SourceInfo
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    primary_keys: Optional[List[str]] = None
    tokens: Optional[Dict[str, str]] = None

    def to_dict(self) -> dict:
        return {
            "table": self.table,
            "op_type": self.op_type,
            "op_ts": self.op_ts,
            "current_ts": self.current_ts,
            "pos": self.pos,
            "primary_keys": self.primary_keys,
            "tokens": self.tokens,
            "source": self.source.to_dict(),
            "before": self.before,
            "after": self.after,
        }

    def to_batch(self, schema: pa.Schema) -> pa.RecordBatch:
        """Materialize the record against its table's value schema."""
        row = self.to_dict()
        if row["tokens"] is not None:
            row["tokens"] = list(row["tokens"].items())
        return pa.RecordBatch.from_pylist([row], schema=schema)


@dataclass
class OutputKey:
    """Key record restricted to primary key columns."""

    values: Dict[str, Any]

    def to_dict(self) -> dict:
        return dict(self.values)

    def to_batch(self, schema: pa.Schema) -> pa.RecordBatch:
        return pa.RecordBatch.from_pylist([self.to_dict()], schema=schema)


FormattedPair = Tuple[OutputRecord, Optional[OutputKey]]


@dataclass
class FormattedData:
    """Caller-owned result slots for one formatting call."""

    primary: Optional[FormattedPair] = None
    secondary: Optional[FormattedPair] = None

    def clear(self) -> None:
        self.primary = None
        self.secondary = None

    def __iter__(self) -> Iterator[FormattedPair]:
        for pair in (self.primary, self.secondary):
            if pair is not None:
                yield pair

    def __len__(self) -> int:
        return sum(1 for _ in self)
