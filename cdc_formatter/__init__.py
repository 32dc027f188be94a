"""CDC operation formatter: turns captured row changes into key/value records."""

from .config import FormatterConfig, PkUpdatePolicy
from .errors import (
    ColumnAlignmentError,
    FatalAbend,
    FormatterError,
    InvalidMessageError,
    ValueCoercionError,
)
from .formatter import OperationFormatter
from .models import (
    ChangeOperation,
    ColumnChange,
    ColumnMeta,
    ColumnValue,
    FormattedData,
    OpType,
    OutputKey,
    OutputRecord,
    TableMetadata,
)
from .schema import SchemaProvider, TableSchemas

__all__ = [
    "FormatterConfig",
    "PkUpdatePolicy",
    "ColumnAlignmentError",
    "FatalAbend",
    "FormatterError",
    "InvalidMessageError",
    "ValueCoercionError",
    "OperationFormatter",
    "ChangeOperation",
    "ColumnChange",
    "ColumnMeta",
    "ColumnValue",
    "FormattedData",
    "OpType",
    "OutputKey",
    "OutputRecord",
    "TableMetadata",
    "SchemaProvider",
    "TableSchemas",
]
