import asyncio
from unittest.mock import MagicMock

from services.migration_service import (
    MIGRATE_FAILURE,
    MIGRATE_SUCCESS,
    UPDATE_FAILURE,
    UPDATE_SUCCESS,
    OrderMigrationWorkflow,
    build_billed_order,
    is_unbilled,
)


def _edited(**changes):
    record = {
        "_id": "A",
        "serialNo": "UB-0001",
        "name": "Jane Doe",
        "referredBy": "d1",
        "category": "Radiology",
        "subcategory": "X-Ray",
        "paymentMode": "Unbilled",
        "finalPayment": 1500.0,
    }
    record.update(changes)
    return record


def _submit(workflow, order_id, edited):
    return asyncio.run(workflow.submit_edit(order_id, edited))


def test_is_unbilled_is_exact_match():
    assert is_unbilled({"paymentMode": "Unbilled"})
    assert not is_unbilled({"paymentMode": "unbilled"})
    assert not is_unbilled({"paymentMode": "Cash"})
    assert not is_unbilled({})


def test_build_billed_order_drops_identity_fields():
    payload = build_billed_order(_edited(id="A", paymentMode="Card", notes="x"))

    assert "_id" not in payload
    assert "id" not in payload
    assert "serialNo" not in payload
    assert payload["paymentMode"] == "Card"
    assert payload["notes"] == "x"


def test_unbilled_edit_updates_in_place_only(unbilled_repo, billed_repo):
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=None)

    result = _submit(workflow, "A", _edited(name="Jane Q. Doe"))

    assert result.success
    assert result.outcome == "updated"
    assert result.refresh_list
    assert result.redirect_to is None
    assert result.notice.message == UPDATE_SUCCESS
    assert unbilled_repo.calls() == [("unbilled", "update", "A")]
    assert billed_repo.calls() == []
    assert unbilled_repo.records["A"]["name"] == "Jane Q. Doe"


def test_failed_update_leaves_record_untouched(unbilled_repo, billed_repo):
    unbilled_repo.fail_on.add("update")
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=None)

    result = _submit(workflow, "A", _edited(name="Changed"))

    assert not result.success
    assert result.outcome == "failed"
    assert result.notice.level == "error"
    assert result.notice.message == UPDATE_FAILURE
    assert unbilled_repo.records["A"]["name"] == "Jane Doe"
    assert billed_repo.calls() == []


def test_paid_edit_deletes_then_creates(call_log, unbilled_repo, billed_repo):
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=None)

    result = _submit(workflow, "A", _edited(paymentMode="Cash"))

    assert call_log == [("unbilled", "delete", "A"), ("billed", "create", None)]
    payload = billed_repo.payloads[0]
    assert "_id" not in payload
    assert "serialNo" not in payload
    assert payload["name"] == "Jane Doe"
    assert payload["paymentMode"] == "Cash"
    assert result.success
    assert result.outcome == "migrated"
    assert result.notice.message == MIGRATE_SUCCESS
    assert result.redirect_to == "/print-report"
    assert result.order["serialNo"] == "OR-0001"
    assert "A" not in unbilled_repo.records


def test_identity_fields_are_dropped_whatever_their_values(unbilled_repo, billed_repo):
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=None)

    _submit(workflow, "B", _edited(_id="something-else", serialNo="", paymentMode="UPI"))

    payload = billed_repo.payloads[0]
    assert "_id" not in payload
    assert "serialNo" not in payload


def test_failed_delete_never_creates(unbilled_repo, billed_repo):
    unbilled_repo.fail_on.add("delete")
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=None)

    result = _submit(workflow, "A", _edited(paymentMode="Cash"))

    assert not result.success
    assert result.outcome == "failed"
    assert result.notice.message == UPDATE_FAILURE
    assert billed_repo.calls() == []
    assert "A" in unbilled_repo.records


def test_missing_record_is_not_migrated(unbilled_repo, billed_repo):
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=None)

    result = _submit(workflow, "ZZZ", _edited(_id="ZZZ", paymentMode="Cash"))

    assert result.outcome == "failed"
    assert billed_repo.calls() == []


def test_create_failure_reports_orphaned_record(unbilled_repo, billed_repo):
    billed_repo.fail_on.add("create")
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=None)
    edited = _edited(paymentMode="Cash")

    result = _submit(workflow, "A", edited)

    assert not result.success
    assert result.outcome == "orphaned"
    assert result.notice.message == MIGRATE_FAILURE
    assert result.orphaned_record == edited
    assert result.redirect_to is None
    assert "A" not in unbilled_repo.records
    assert billed_repo.records == {}


def test_migration_is_audited(unbilled_repo, billed_repo):
    audit = MagicMock()
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=audit)

    _submit(workflow, "A", _edited(paymentMode="Cash"))

    audit.assert_called_once()
    args, kwargs = audit.call_args
    assert args == ("A", "migrate")
    assert kwargs["status"] == "success"
    assert kwargs["response"]["_id"] == "billed-1"


def test_audit_failure_does_not_change_outcome(unbilled_repo, billed_repo):
    audit = MagicMock(side_effect=RuntimeError("audit store down"))
    workflow = OrderMigrationWorkflow(unbilled_repo, billed_repo, audit=audit)

    result = _submit(workflow, "A", _edited(paymentMode="Cash"))

    assert result.success
    assert result.outcome == "migrated"
