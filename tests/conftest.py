"""Shared fixtures: a customer table and operations against it."""

from datetime import datetime, timedelta

import pytest

from cdc_formatter.coercion import SqlType
from cdc_formatter.models import (
    ChangeOperation,
    ColumnChange,
    ColumnMeta,
    ColumnValue,
    OpType,
    TableMetadata,
)
from cdc_formatter.timestamps import UniqueTimestamp


@pytest.fixture
def customer_table():
    return TableMetadata(
        name="QASOURCE.TCUSTMER",
        columns=(
            ColumnMeta("CUST_CODE", SqlType.VARCHAR, is_key=True),
            ColumnMeta("NAME", SqlType.VARCHAR),
            ColumnMeta("CITY", SqlType.VARCHAR),
            ColumnMeta("BALANCE", SqlType.NUMERIC),
            ColumnMeta("ORDERS", SqlType.INTEGER),
        ),
    )


@pytest.fixture
def keyless_table():
    return TableMetadata(
        name="QASOURCE.TAUDIT",
        columns=(
            ColumnMeta("MESSAGE", SqlType.VARCHAR),
            ColumnMeta("SEVERITY", SqlType.SMALLINT),
        ),
    )


def change(before=None, after=None, has_before=None, has_after=None):
    """ColumnChange helper; pass has_*=True with a None value for explicit null."""
    return ColumnChange(
        before=ColumnValue(before) if before is not None or has_before else None,
        after=ColumnValue(after) if after is not None or has_after else None,
    )


def make_op(op_type, columns, table="QASOURCE.TCUSTMER", tokens=None):
    return ChangeOperation(
        op_type=op_type,
        table=table,
        columns=tuple(columns),
        op_ts="2026-10-17 09:15:02.000000",
        position="00000000000000001234",
        tokens=tokens or {},
        op_code=op_type.value,
    )


@pytest.fixture
def insert_op():
    return make_op(
        OpType.INSERT,
        [
            change(after="WILL"),
            change(after="BG SOFTWARE CO."),
            change(after="SEATTLE"),
            change(after="1024.5"),
            change(after="3"),
        ],
    )


@pytest.fixture
def delete_op():
    return make_op(
        OpType.DELETE,
        [
            change(before="DAVE"),
            change(before="DAVE'S PLANES INC."),
            change(before="TALLAHASSEE"),
            change(before="0.25"),
            change(before="12"),
        ],
    )


@pytest.fixture
def update_op():
    return make_op(
        OpType.UPDATE,
        [
            change(before="ANN", after="ANN"),
            change(before="ANN'S BOATS", after="ANN'S BOATS"),
            change(before="NEW YORK", after="BOSTON"),
            change(before="10", after="20"),
            change(before="1", after="2"),
        ],
    )


@pytest.fixture
def pk_update_op():
    return make_op(
        OpType.PK_UPDATE,
        [
            change(before="JANE", after="JOHN"),
            change(before="ROCKY FLYER INC.", after="ROCKY FLYER INC."),
            change(before="DENVER", after="DENVER"),
            change(before="5", after="5"),
            change(before="7", after="7"),
        ],
    )


@pytest.fixture
def fixed_timestamps():
    """Timestamp generator driven by a clock that never advances."""
    start = datetime(2026, 10, 17, 9, 15, 2)
    return UniqueTimestamp(clock=lambda: start)


@pytest.fixture
def stepping_clock():
    current = {"now": datetime(2026, 10, 17, 9, 15, 2)}

    def clock():
        current["now"] += timedelta(seconds=1)
        return current["now"]

    return clock
