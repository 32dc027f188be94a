"""Formats CDC row operations into structured value and key records."""

from typing import Optional

import structlog

from .assembler import assemble
from .config import FormatterConfig, PkUpdatePolicy
from .models import ChangeOperation, FormattedData, TableMetadata
from .projection import align_columns
from .routing import plan_operation
from .schema import SchemaProvider
from .timestamps import UniqueTimestamp

logger = structlog.get_logger()

_PK_HANDLING_SUMMARY = {
    PkUpdatePolicy.ABEND: "abend",
    PkUpdatePolicy.TREAT_AS_UPDATE: "process as a normal update",
    PkUpdatePolicy.SPLIT_DELETE_INSERT: "process as a delete and an insert",
}


class OperationFormatter:
    """Row formatter: one call per captured operation.

    The formatter keeps no per-operation state. The schema cache is the only
    state shared between calls, and it is safe to use from several apply threads.
    """

    def __init__(
        self,
        config: Optional[FormatterConfig] = None,
        schema_provider: Optional[SchemaProvider] = None,
        timestamps: Optional[UniqueTimestamp] = None,
    ) -> None:
        self.config = config or FormatterConfig()
        self.schema_provider = schema_provider or SchemaProvider(
            treat_all_as_strings=self.config.treat_all_as_strings
        )
        self.timestamps = timestamps or UniqueTimestamp()
        self._log_configuration()

    def _log_configuration(self) -> None:
        config = self.config
        logger.info(
            "formatter_configured",
            insert_op_key=config.insert_op_key,
            update_op_key=config.update_op_key,
            delete_op_key=config.delete_op_key,
            column_mapping="string" if config.treat_all_as_strings else "typed",
            pk_update_handling=_PK_HANDLING_SUMMARY[config.pk_update_handling],
            current_ts_format="iso8601" if config.use_iso8601_timestamp else "plain",
            include_primary_keys=config.include_primary_keys,
            include_tokens=config.include_tokens,
        )

    def create_formatted_data(self) -> FormattedData:
        return FormattedData()

    def format_op(
        self,
        operation: ChangeOperation,
        table_meta: TableMetadata,
        output: Optional[FormattedData] = None,
    ) -> FormattedData:
        """Format one operation into ``output`` (a new container if omitted).

        Raises FatalAbend, ValueCoercionError or ColumnAlignmentError. On
        failure ``output`` is left untouched.
        """
        if output is None:
            output = self.create_formatted_data()
        logger.debug(
            "format_op",
            table=table_meta.name,
            op_type=operation.op_type.value,
            pos=operation.position,
        )
        try:
            schemas = self.schema_provider.request_schema(table_meta.name, table_meta)
            columns = align_columns(operation, table_meta)
            plan = plan_operation(operation.op_type, self.config.pk_update_handling)
            pairs = assemble(
                plan,
                operation,
                table_meta,
                columns,
                schemas,
                self.config,
                self.timestamps,
            )
        except Exception as e:
            logger.error(
                "format_op_failed",
                table=table_meta.name,
                op_type=operation.op_type.value,
                op_code=operation.op_code,
                error=str(e),
            )
            raise

        output.clear()
        output.primary = pairs[0]
        if len(pairs) > 1:
            output.secondary = pairs[1]
        return output

    def ddl_operation(self, object_type: str, object_name: str, ddl_text: str) -> None:
        """Invalidate the cached schemas of a table changed by DDL."""
        logger.info(
            "ddl_operation",
            object_type=object_type,
            object_name=object_name,
            ddl_text=ddl_text,
        )
        self.schema_provider.drop_schema(object_name)
