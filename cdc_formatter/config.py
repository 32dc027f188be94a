"""Configuration settings for the CDC operation formatter."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

import structlog

from .models import OpType

logger = structlog.get_logger()


class PkUpdatePolicy(str, Enum):
    """Action taken when an update changes primary key columns."""

    ABEND = "abend"
    TREAT_AS_UPDATE = "update"
    SPLIT_DELETE_INSERT = "delete-insert"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PkUpdatePolicy":
        """Match a configured action name, falling back to ABEND."""
        for policy in cls:
            if value is not None and value.strip().lower() == policy.value:
                return policy
        logger.warning(
            "invalid_pk_update_handling",
            value=value,
            fallback=cls.ABEND.value,
        )
        return cls.ABEND


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() == "true"


@dataclass(frozen=True)
class FormatterConfig:
    """Formatter options, fixed before the first operation is formatted."""

    insert_op_key: str = "I"
    update_op_key: str = "U"
    delete_op_key: str = "D"
    pk_update_handling: PkUpdatePolicy = PkUpdatePolicy.ABEND
    treat_all_as_strings: bool = False
    use_iso8601_timestamp: bool = True
    include_primary_keys: bool = False
    include_tokens: bool = False

    @classmethod
    def from_env(cls) -> "FormatterConfig":
        return cls(
            insert_op_key=os.getenv("FORMATTER_INSERT_OP_KEY", "I"),
            update_op_key=os.getenv("FORMATTER_UPDATE_OP_KEY", "U"),
            delete_op_key=os.getenv("FORMATTER_DELETE_OP_KEY", "D"),
            pk_update_handling=PkUpdatePolicy.parse(
                os.getenv("FORMATTER_PK_UPDATE_HANDLING", "abend")
            ),
            treat_all_as_strings=os.getenv(
                "FORMATTER_TREAT_ALL_AS_STRINGS", "false"
            ).lower()
            == "true",
            use_iso8601_timestamp=os.getenv("FORMATTER_USE_ISO8601", "true").lower()
            == "true",
            include_primary_keys=os.getenv(
                "FORMATTER_INCLUDE_PRIMARY_KEYS", "false"
            ).lower()
            == "true",
            include_tokens=os.getenv("FORMATTER_INCLUDE_TOKENS", "false").lower()
            == "true",
        )

    @classmethod
    def from_properties(cls, props: Mapping[str, str]) -> "FormatterConfig":
        """Build from option names such as ``insert-op-key``; unknown keys are ignored."""
        return cls(
            insert_op_key=props.get("insert-op-key", "I"),
            update_op_key=props.get("update-op-key", "U"),
            delete_op_key=props.get("delete-op-key", "D"),
            pk_update_handling=PkUpdatePolicy.parse(
                props.get("pk-update-handling", "abend")
            ),
            treat_all_as_strings=_as_bool(props.get("treat-all-as-strings"), False),
            use_iso8601_timestamp=_as_bool(props.get("use-iso8601-timestamp"), True),
            include_primary_keys=_as_bool(props.get("include-primary-keys"), False),
            include_tokens=_as_bool(props.get("include-tokens"), False),
        )

    def op_key(self, op_type: OpType) -> str:
        """Op-type code written to the metadata block."""
        keys = {
            OpType.INSERT: self.insert_op_key,
            OpType.UPDATE: self.update_op_key,
            OpType.DELETE: self.delete_op_key,
        }
        return keys[op_type]

