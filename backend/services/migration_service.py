"""
Edit workflow for unbilled orders.

An edit that keeps the sentinel payment mode updates the unbilled record in
place. Any other payment mode moves the record into the billed-order
collection: the unbilled record is deleted first, then a new billed order is
created without the old ``_id`` and ``serialNo`` so the billing system
assigns fresh ones.

The two collections are not transactionally linked. When the create fails
after the delete went through, the record is in neither collection. The
result then carries the edited record as ``orphaned_record`` and the same
snapshot is written to the audit log when one is configured. Nothing is
re-inserted automatically.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from billing_client import BillingApiError
from config import settings
from repositories.audit_repository import log_action
from repositories.base import RecordRepository
from schemas import EditOrderResult, Notice

logger = logging.getLogger("unbilled-panel")

UPDATE_SUCCESS = "Unbilled order updated successfully"
UPDATE_FAILURE = "Failed to update order"
MIGRATE_SUCCESS = "Order moved to regular orders successfully"
MIGRATE_FAILURE = "Failed to move order to regular orders"

# Assigned by the billed-order collection on create.
RESET_ON_MIGRATION = ("_id", "id", "serialNo")

AuditFn = Callable[..., Any]


def is_unbilled(record: Dict[str, Any]) -> bool:
    return record.get("paymentMode") == settings.unbilled_payment_mode


def build_billed_order(record: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in record.items() if key not in RESET_ON_MIGRATION}


def _failed(message: str, outcome: str = "failed", **extra: Any) -> EditOrderResult:
    return EditOrderResult(
        success=False,
        outcome=outcome,
        notice=Notice(level="error", message=message),
        **extra,
    )


class OrderMigrationWorkflow:
    def __init__(
        self,
        unbilled: RecordRepository,
        billed: RecordRepository,
        *,
        audit: Optional[AuditFn] = log_action,
    ) -> None:
        self.unbilled = unbilled
        self.billed = billed
        self.audit = audit

    async def submit_edit(self, order_id: str, edited: Dict[str, Any]) -> EditOrderResult:
        if is_unbilled(edited):
            return await self._update_in_place(order_id, edited)
        return await self._migrate(order_id, edited)

    async def _update_in_place(
        self, order_id: str, edited: Dict[str, Any]
    ) -> EditOrderResult:
        try:
            updated = await asyncio.to_thread(self.unbilled.update, order_id, edited)
        except BillingApiError as exc:
            logger.error("Error updating unbilled order %s: %s", order_id, exc)
            await self._record(order_id, "update", edited, {"error": str(exc)}, "error")
            return _failed(UPDATE_FAILURE)
        await self._record(order_id, "update", edited, updated, "success")
        return EditOrderResult(
            success=True,
            outcome="updated",
            notice=Notice(level="success", message=UPDATE_SUCCESS),
            order=updated,
            refresh_list=True,
        )

    async def _migrate(self, order_id: str, edited: Dict[str, Any]) -> EditOrderResult:
        try:
            deleted = await asyncio.to_thread(self.unbilled.delete, order_id)
        except BillingApiError as exc:
            logger.error("Error removing unbilled order %s before migration: %s", order_id, exc)
            await self._record(order_id, "migrate", edited, {"error": str(exc)}, "error")
            return _failed(UPDATE_FAILURE)
        if not deleted:
            logger.error("Unbilled order %s not found, migration skipped", order_id)
            return _failed(UPDATE_FAILURE)

        payload = build_billed_order(edited)
        try:
            created = await asyncio.to_thread(self.billed.create, payload)
        except BillingApiError as exc:
            logger.error(
                "Unbilled order %s was deleted but the billed order was not created: %s; "
                "record snapshot: %s",
                order_id,
                exc,
                edited,
            )
            await self._record(
                order_id, "migrate", edited, {"error": str(exc)}, "orphaned"
            )
            return _failed(MIGRATE_FAILURE, outcome="orphaned", orphaned_record=edited)

        logger.info(
            "Unbilled order %s moved to billed orders as %s",
            order_id,
            created.get("_id") or created.get("id"),
        )
        await self._record(order_id, "migrate", edited, created, "success")
        return EditOrderResult(
            success=True,
            outcome="migrated",
            notice=Notice(level="success", message=MIGRATE_SUCCESS),
            order=created,
            redirect_to=settings.billed_report_path,
        )

    async def _record(
        self,
        order_id: str,
        action: str,
        request: Dict[str, Any],
        response: Dict[str, Any],
        status: str,
    ) -> None:
        if self.audit is None:
            return
        try:
            await asyncio.to_thread(
                self.audit,
                order_id,
                action,
                request=request,
                response=response,
                status=status,
            )
        except Exception as exc:  # pragma: no cover - audit store outage
            logger.warning("Unable to write audit log for order %s: %s", order_id, exc)
