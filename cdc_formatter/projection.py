"""Selection of column values for payload and key blocks."""

from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from .coercion import coerce_value
from .config import FormatterConfig
from .errors import ColumnAlignmentError
from .models import (
    ChangeOperation,
    ColumnMeta,
    ColumnValue,
    Side,
    TableMetadata,
)


class AlignedColumn(NamedTuple):
    """Column metadata paired with that column's before and after images."""

    meta: ColumnMeta
    before: Optional[ColumnValue]
    after: Optional[ColumnValue]

    def image(self, side: Side) -> Optional[ColumnValue]:
        return self.before if side is Side.BEFORE else self.after


def align_columns(
    operation: ChangeOperation, table_meta: TableMetadata
) -> List[AlignedColumn]:
    """Zip operation columns with table metadata by position."""
    if len(operation.columns) != len(table_meta.columns):
        raise ColumnAlignmentError(
            f"Operation on [{table_meta.name}] has {len(operation.columns)} columns, "
            f"table metadata has {len(table_meta.columns)}"
        )
    return [
        AlignedColumn(meta, change.before, change.after)
        for meta, change in zip(table_meta.columns, operation.columns)
    ]


def project(
    columns: List[AlignedColumn], side: Side, keys_only: bool = False
) -> List[Tuple[ColumnMeta, str]]:
    """Columns to include from one side, in table order.

    A column is included only when its image on ``side`` was captured and is
    not null. Absent and null images are both omitted, so the output cannot
    tell the two apart.
    """
    selected = []
    for column in columns:
        if keys_only and not column.meta.is_key:
            continue
        image = column.image(side)
        if image is not None and not image.is_null:
            selected.append((column.meta, image.value))
    return selected


def build_block(
    columns: List[AlignedColumn],
    side: Side,
    config: FormatterConfig,
    keys_only: bool = False,
) -> Dict[str, Any]:
    """Coerced field values for a payload or key block."""
    return {
        meta.name: coerce_value(
            meta.sql_type,
            raw,
            treat_all_as_strings=config.treat_all_as_strings,
            column=meta.name,
        )
        for meta, raw in project(columns, side, keys_only=keys_only)
    }


def build_key_block(
    columns: List[AlignedColumn], side: Side, config: FormatterConfig
) -> Optional[Dict[str, Any]]:
    """Key block from key columns, or None when the table has no key columns."""
    if not any(column.meta.is_key for column in columns):
        return None
    return build_block(columns, side, config, keys_only=True)
