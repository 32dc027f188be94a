"""Command-line driver: JSON lines in, formatted key/value lines out."""

import io
import json

from cdc_formatter.__main__ import run
from cdc_formatter.config import FormatterConfig, PkUpdatePolicy


COLUMNS = [
    {"name": "ID", "type": 4, "key": True},
    {"name": "PRICE", "type": 2},
]


def _op(op_type, before=None, after=None):
    columns = []
    for i, col in enumerate(COLUMNS):
        entry = dict(col)
        if before is not None:
            entry["before"] = before[i]
        if after is not None:
            entry["after"] = after[i]
        columns.append(entry)
    return json.dumps({
        "table": "SHOP.ITEMS",
        "op_type": op_type,
        "op_ts": "2026-10-17 09:15:02.000000",
        "pos": "42",
        "columns": columns,
    })


def test_run_formats_each_operation():
    source = io.StringIO("\n".join([
        _op("I", after=["1", "9.99"]),
        "",
        json.dumps({"ddl": {"object_name": "SHOP.ITEMS", "ddl_text": "ALTER TABLE"}}),
        _op("PK", before=["1", "9.99"], after=["2", "9.99"]),
    ]))
    out = io.StringIO()
    config = FormatterConfig(pk_update_handling=PkUpdatePolicy.SPLIT_DELETE_INSERT)

    assert run(source, out, config) == 0

    lines = [json.loads(line) for line in out.getvalue().splitlines()]
    assert [line["value"]["op_type"] for line in lines] == ["I", "D", "I"]
    assert lines[0]["key"] == {"ID": 1}
    assert lines[0]["value"]["after"] == {"ID": 1, "PRICE": 9.99}
    assert lines[1]["key"] == {"ID": 1}
    assert lines[2]["key"] == {"ID": 2}


def test_run_halts_on_fatal_operation():
    source = io.StringIO(
        _op("PK", before=["1", "1"], after=["2", "1"]) + "\n" + _op("I", after=["3", "1"])
    )
    out = io.StringIO()
    assert run(source, out, FormatterConfig()) == 1
    assert out.getvalue() == ""


def test_run_rejects_bad_json():
    assert run(io.StringIO("{not json\n"), io.StringIO(), FormatterConfig()) == 2


def test_run_rejects_non_object_line():
    out = io.StringIO()
    assert run(io.StringIO("[1, 2]\n"), out, FormatterConfig()) == 2
    assert out.getvalue() == ""


def test_run_rejects_malformed_column_type():
    message = json.loads(_op("I", after=["1", "2.5"]))
    message["columns"][0]["type"] = "int"
    assert run(io.StringIO(json.dumps(message) + "\n"), io.StringIO(), FormatterConfig()) == 2


def test_run_rejects_malformed_ddl():
    source = io.StringIO(json.dumps({"ddl": {"ddl_text": "DROP TABLE X"}}) + "\n")
    assert run(source, io.StringIO(), FormatterConfig()) == 2


def test_non_finite_floats_written_as_strict_json():
    message = {
        "table": "SHOP.GAUGES",
        "op_type": "I",
        "op_ts": "2026-10-17 09:15:02.000000",
        "pos": "7",
        "columns": [
            {"name": "ID", "type": 4, "key": True, "after": "1"},
            {"name": "LOW", "type": 7, "after": "NaN"},
            {"name": "HIGH", "type": 7, "after": "-Infinity"},
        ],
    }
    out = io.StringIO()
    assert run(io.StringIO(json.dumps(message) + "\n"), out, FormatterConfig()) == 0

    def reject_constant(token):
        raise ValueError(token)

    line = json.loads(out.getvalue(), parse_constant=reject_constant)
    assert line["value"]["after"] == {"ID": 1, "LOW": "NaN", "HIGH": "-Infinity"}
