"""Builds output records and keys by executing an emission plan."""

from typing import List

import structlog

from .config import FormatterConfig
from .errors import FatalAbend
from .models import (
    ChangeOperation,
    FormattedPair,
    OutputKey,
    OutputRecord,
    Side,
    SourceInfo,
    TableMetadata,
)
from .projection import AlignedColumn, build_block, build_key_block
from .routing import Emission, Fatal, Plan
from .schema import TableSchemas
from .timestamps import UniqueTimestamp

logger = structlog.get_logger()


def _build_record(
    emission: Emission,
    operation: ChangeOperation,
    table_meta: TableMetadata,
    columns: List[AlignedColumn],
    config: FormatterConfig,
    timestamps: UniqueTimestamp,
) -> OutputRecord:
    record = OutputRecord(
        table=table_meta.name,
        op_type=config.op_key(emission.kind),
        op_ts=operation.op_ts,
        current_ts=timestamps.generate(config.use_iso8601_timestamp),
        pos=operation.position,
        source=SourceInfo(entity=table_meta.short_name),
        primary_keys=table_meta.key_columns if config.include_primary_keys else None,
        tokens=dict(operation.tokens) if config.include_tokens else None,
    )
    block = build_block(columns, emission.side, config)
    if emission.side is Side.BEFORE:
        record.before = block
    else:
        record.after = block
    return record


def assemble(
    plan: Plan,
    operation: ChangeOperation,
    table_meta: TableMetadata,
    columns: List[AlignedColumn],
    schemas: TableSchemas,
    config: FormatterConfig,
    timestamps: UniqueTimestamp,
) -> List[FormattedPair]:
    """Build one (record, key) pair per planned emission.

    Nothing is returned unless every emission was built.
    """
    if isinstance(plan, Fatal):
        logger.error(
            "fatal_operation",
            table=table_meta.name,
            op_type=operation.op_type.value,
            reason=plan.reason,
        )
        raise FatalAbend(plan.reason, table_meta.name, operation.op_type.value)

    pairs = []
    for emission in plan.emissions:
        record = _build_record(
            emission, operation, table_meta, columns, config, timestamps
        )
        key = None
        if schemas.key_schema is not None:
            key_values = build_key_block(columns, emission.side, config)
            key = OutputKey(key_values or {})
        pairs.append((record, key))
    return pairs
