"""Formats a stream of JSON-encoded CDC operations from stdin to stdout."""

import json
import math
import sys
from typing import IO, Any, Optional

import structlog

from .config import FormatterConfig
from .errors import FormatterError, InvalidMessageError
from .formatter import OperationFormatter
from .logging_config import configure_logging
from .models import ChangeOperation, FormattedData, TableMetadata

logger = structlog.get_logger()


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats, which strict JSON cannot carry, with their names."""
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


def _write_pairs(data: FormattedData, out: IO[str]) -> None:
    for record, key in data:
        line = {
            "key": key.to_dict() if key is not None else None,
            "value": record.to_dict(),
        }
        out.write(json.dumps(_json_safe(line), allow_nan=False) + "\n")


def process_line(formatter: OperationFormatter, line: str, out: IO[str]) -> None:
    """Handle one input line: a DDL notification or a row operation."""
    message = json.loads(line)
    if not isinstance(message, dict):
        raise InvalidMessageError(
            f"Expected a JSON object, got {type(message).__name__}"
        )

    try:
        ddl = message.get("ddl")
        if ddl is not None:
            object_type = ddl.get("object_type", "TABLE")
            object_name = ddl["object_name"]
            ddl_text = ddl.get("ddl_text", "")
        else:
            table_meta = TableMetadata.from_dict(message)
            operation = ChangeOperation.from_dict(message)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise InvalidMessageError(f"Malformed message: {e!r}") from e

    if ddl is not None:
        formatter.ddl_operation(object_type, object_name, ddl_text)
        return

    data = formatter.format_op(operation, table_meta)
    _write_pairs(data, out)


def run(
    source: IO[str],
    out: IO[str],
    config: Optional[FormatterConfig] = None,
) -> int:
    """Format every line of ``source``; returns a process exit code.

    Exit codes: 0 success, 1 formatting halted, 2 unreadable input.
    """
    formatter = OperationFormatter(config or FormatterConfig.from_env())
    processed = 0
    for line_no, line in enumerate(source, start=1):
        if not line.strip():
            continue
        try:
            process_line(formatter, line, out)
        except json.JSONDecodeError as e:
            logger.error("json_decode_error", line=line_no, error=str(e))
            return 2
        except InvalidMessageError as e:
            logger.error("invalid_message", line=line_no, error=str(e))
            return 2
        except FormatterError as e:
            logger.error("formatting_halted", line=line_no, error=str(e))
            return 1
        processed += 1
    logger.info("input_processed", operations=processed)
    return 0


def main() -> None:
    """Main entry point."""
    configure_logging()
    logger.info("initializing_cdc_formatter")
    sys.exit(run(sys.stdin, sys.stdout))


if __name__ == "__main__":
    main()
