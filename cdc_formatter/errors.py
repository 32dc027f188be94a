"""Exceptions raised while formatting CDC operations."""

from typing import Optional


class FormatterError(Exception):
    """Base class for formatter failures."""


class FatalAbend(FormatterError):
    """Unrecoverable operation; the owning pipeline is expected to halt."""

    def __init__(self, message: str, table: str, op_type: str) -> None:
        super().__init__(message)
        self.table = table
        self.op_type = op_type


class ValueCoercionError(FormatterError, ValueError):
    """A source column value could not be parsed for its declared type."""

    def __init__(
        self,
        raw_value: str,
        sql_type: int,
        column: Optional[str] = None,
    ) -> None:
        target = f"column [{column}]" if column else "value"
        super().__init__(
            f"Unable to coerce {target} of source type {sql_type}: {raw_value!r}"
        )
        self.raw_value = raw_value
        self.sql_type = sql_type
        self.column = column


class ColumnAlignmentError(FormatterError):
    """Operation columns do not line up with the table metadata columns."""


class InvalidMessageError(FormatterError):
    """An input line is not a well-formed operation or DDL message."""
