"""Key and value schemas per table, built from table metadata and cached."""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import pyarrow as pa
import structlog

from .coercion import TypeClass, type_class_for
from .models import TableMetadata

logger = structlog.get_logger()


ARROW_TYPES: Dict[TypeClass, pa.DataType] = {
    TypeClass.DOUBLE: pa.float64(),
    TypeClass.INT32: pa.int32(),
    TypeClass.INT64: pa.int64(),
    TypeClass.FLOAT32: pa.float32(),
    TypeClass.BOOLEAN: pa.bool_(),
    TypeClass.STRING: pa.string(),
}

SOURCE_TYPE = pa.struct([
    ("entity", pa.string()),
    ("snapshot_lastone", pa.bool_()),
    ("is_increment", pa.bool_()),
    ("total_size", pa.int64()),
    ("index", pa.int64()),
])


@dataclass(frozen=True)
class TableSchemas:
    """Value schema and optional key schema for one table."""

    value_schema: pa.Schema
    key_schema: Optional[pa.Schema] = None


def _column_fields(table_meta: TableMetadata, treat_all_as_strings: bool, keys_only: bool):
    fields = []
    for col in table_meta.columns:
        if keys_only and not col.is_key:
            continue
        if treat_all_as_strings:
            arrow_type = pa.string()
        else:
            arrow_type = ARROW_TYPES[type_class_for(col.sql_type)]
        fields.append(pa.field(col.name, arrow_type, nullable=True))
    return fields


def build_table_schemas(
    table_meta: TableMetadata, treat_all_as_strings: bool = False
) -> TableSchemas:
    """Derive key and value schemas from a table's column metadata."""
    row_type = pa.struct(_column_fields(table_meta, treat_all_as_strings, False))
    value_schema = pa.schema([
        ("table", pa.string()),
        ("op_type", pa.string()),
        ("op_ts", pa.string()),
        ("current_ts", pa.string()),
        ("pos", pa.string()),
        ("primary_keys", pa.list_(pa.string())),
        ("tokens", pa.map_(pa.string(), pa.string())),
        ("source", SOURCE_TYPE),
        ("before", row_type),
        ("after", row_type),
    ])

    key_fields = _column_fields(table_meta, treat_all_as_strings, True)
    key_schema = pa.schema(key_fields) if key_fields else None
    return TableSchemas(value_schema=value_schema, key_schema=key_schema)


class SchemaProvider:
    """Thread-safe cache of table schemas keyed by table name.

    A table's schemas are built at most once until ``drop_schema`` removes them.
    """

    def __init__(
        self,
        treat_all_as_strings: bool = False,
        builder: Callable[[TableMetadata, bool], TableSchemas] = build_table_schemas,
    ) -> None:
        self.treat_all_as_strings = treat_all_as_strings
        self._builder = builder
        self._schemas: Dict[str, TableSchemas] = {}
        self._lock = threading.Lock()

    def request_schema(self, table_name: str, table_meta: TableMetadata) -> TableSchemas:
        schemas = self._schemas.get(table_name)
        if schemas is not None:
            return schemas
        with self._lock:
            schemas = self._schemas.get(table_name)
            if schemas is None:
                schemas = self._builder(table_meta, self.treat_all_as_strings)
                self._schemas[table_name] = schemas
                logger.debug(
                    "schema_built",
                    table=table_name,
                    has_key=schemas.key_schema is not None,
                )
            return schemas

    def drop_schema(self, table_name: str) -> None:
        with self._lock:
            removed = self._schemas.pop(table_name, None)
        if removed is not None:
            logger.info("schema_dropped", table=table_name)

    def __contains__(self, table_name: str) -> bool:
        return table_name in self._schemas
