"""Operation routing: emission plans per op type and pk-update policy."""

import pytest

from cdc_formatter.config import PkUpdatePolicy
from cdc_formatter.models import OpType, Side
from cdc_formatter.routing import Fatal, Pair, Single, plan_operation


@pytest.mark.parametrize("policy", list(PkUpdatePolicy))
def test_insert_uses_after_image(policy):
    plan = plan_operation(OpType.INSERT, policy)
    assert isinstance(plan, Single)
    assert plan.emission.kind is OpType.INSERT
    assert plan.emission.side is Side.AFTER


def test_delete_uses_before_image():
    plan = plan_operation(OpType.DELETE, PkUpdatePolicy.ABEND)
    assert plan.emissions[0].kind is OpType.DELETE
    assert plan.emissions[0].side is Side.BEFORE


def test_plain_update_uses_only_after_image():
    plan = plan_operation(OpType.UPDATE, PkUpdatePolicy.SPLIT_DELETE_INSERT)
    assert isinstance(plan, Single)
    assert plan.emissions[0].kind is OpType.UPDATE
    assert plan.emissions[0].side is Side.AFTER


def test_pk_update_abend_is_fatal():
    plan = plan_operation(OpType.PK_UPDATE, PkUpdatePolicy.ABEND)
    assert isinstance(plan, Fatal)
    assert plan.emissions == ()
    assert "ABEND" in plan.reason


def test_pk_update_as_update_forces_update_semantics():
    plan = plan_operation(OpType.PK_UPDATE, PkUpdatePolicy.TREAT_AS_UPDATE)
    assert isinstance(plan, Single)
    assert plan.emission.kind is OpType.UPDATE
    assert plan.emission.side is Side.AFTER


def test_pk_update_delete_insert_splits():
    plan = plan_operation(OpType.PK_UPDATE, PkUpdatePolicy.SPLIT_DELETE_INSERT)
    assert isinstance(plan, Pair)
    first, second = plan.emissions
    assert (first.kind, first.side) == (OpType.DELETE, Side.BEFORE)
    assert (second.kind, second.side) == (OpType.INSERT, Side.AFTER)


@pytest.mark.parametrize("policy", list(PkUpdatePolicy))
def test_unknown_operation_is_fatal(policy):
    plan = plan_operation(OpType.UNKNOWN, policy)
    assert isinstance(plan, Fatal)
    assert "unknown" in plan.reason
