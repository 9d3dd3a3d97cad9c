import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from billing_client import BillingApiError
from config import settings
from repositories.audit_repository import log_action
from repositories.base import RecordRepository
from schemas import BulkDeleteResponse, Notice, UnbilledListResponse, UnbilledOrderRow
from services.doctors_service import doctor_names, get_doctors, resolve_doctor_name
from services.filtering import DateRange, filter_orders

logger = logging.getLogger("unbilled-panel")

DELETE_SUCCESS = "Order deleted successfully"
DELETE_FAILURE = "Failed to delete the order"
BULK_DELETE_SUCCESS = "Selected orders deleted successfully"
BULK_DELETE_FAILURE = "Failed to delete some orders"


def _parse_float(value: Any) -> Optional[float]:
    try:
        if value is None or value == "":
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        timestamp = value / 1000 if value > 10**12 else value
        parsed = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            if value.isdigit():
                return _parse_datetime(int(value))
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(ZoneInfo(settings.display_timezone))
    return parsed


def format_order(raw: Dict[str, Any], names: Dict[str, str]) -> UnbilledOrderRow:
    referred_by = raw.get("referredBy")
    if isinstance(referred_by, dict):
        referred_by = referred_by.get("_id") or referred_by.get("id")
    return UnbilledOrderRow(
        id=str(raw.get("_id") or raw.get("id") or ""),
        serialNo=str(raw.get("serialNo") or ""),
        name=str(raw.get("name") or ""),
        referredBy=str(referred_by) if referred_by else None,
        doctor_name=resolve_doctor_name(names, referred_by),
        category=raw.get("category"),
        subcategory=raw.get("subcategory"),
        paymentMode=raw.get("paymentMode"),
        finalPayment=_parse_float(raw.get("finalPayment")),
        createdAt=_parse_datetime(raw.get("createdAt")),
        raw=raw,
    )


async def load_unbilled_rows(
    unbilled_repo: RecordRepository,
    doctors_repo: RecordRepository,
) -> UnbilledListResponse:
    doctors, raw_orders = await asyncio.gather(
        get_doctors(doctors_repo),
        asyncio.to_thread(unbilled_repo.list),
        return_exceptions=True,
    )
    if isinstance(doctors, BaseException):
        raise doctors
    if isinstance(raw_orders, BillingApiError):
        logger.warning("Error fetching unbilled orders: %s", raw_orders)
        return UnbilledListResponse(items=[], total=0, error=str(raw_orders))
    if isinstance(raw_orders, BaseException):
        raise raw_orders
    names = doctor_names(doctors.items)
    rows = [format_order(item, names) for item in raw_orders]
    return UnbilledListResponse(items=rows, total=len(rows), error=doctors.error)


async def fetch_unbilled_rows(
    unbilled_repo: RecordRepository,
    names: Dict[str, str],
) -> UnbilledListResponse:
    """Unbilled list only, with doctor names resolved from an already loaded map."""
    try:
        raw_orders = await asyncio.to_thread(unbilled_repo.list)
    except BillingApiError as exc:
        logger.warning("Error fetching unbilled orders: %s", exc)
        return UnbilledListResponse(items=[], total=0, error=str(exc))
    rows = [format_order(item, names) for item in raw_orders]
    return UnbilledListResponse(items=rows, total=len(rows))


async def list_unbilled(
    unbilled_repo: RecordRepository,
    doctors_repo: RecordRepository,
    *,
    search: str = "",
    date_range: Optional[DateRange] = None,
) -> UnbilledListResponse:
    loaded = await load_unbilled_rows(unbilled_repo, doctors_repo)
    rows = filter_orders(loaded.items, search, date_range)
    return UnbilledListResponse(items=rows, total=len(rows), error=loaded.error)


async def get_unbilled(
    unbilled_repo: RecordRepository,
    doctors_repo: RecordRepository,
    order_id: str,
) -> Optional[UnbilledOrderRow]:
    raw = await asyncio.to_thread(unbilled_repo.get, order_id)
    if raw is None:
        return None
    doctors = await get_doctors(doctors_repo)
    return format_order(raw, doctor_names(doctors.items))


async def _audit_delete(order_id: str, status: str) -> None:
    try:
        await asyncio.to_thread(log_action, order_id, "delete", status=status)
    except Exception as exc:  # pragma: no cover - audit store outage
        logger.warning("Unable to write audit log for order %s: %s", order_id, exc)


async def delete_unbilled(unbilled_repo: RecordRepository, order_id: str) -> bool:
    deleted = await asyncio.to_thread(unbilled_repo.delete, order_id)
    if deleted:
        await _audit_delete(order_id, "success")
    return deleted


async def delete_many(
    unbilled_repo: RecordRepository,
    order_ids: Sequence[str],
) -> BulkDeleteResponse:
    ids = list(dict.fromkeys(order_ids))
    results = await asyncio.gather(
        *(asyncio.to_thread(unbilled_repo.delete, order_id) for order_id in ids),
        return_exceptions=True,
    )
    deleted: List[str] = []
    failed: List[str] = []
    for order_id, result in zip(ids, results):
        if isinstance(result, BaseException):
            logger.error("Error deleting unbilled order %s: %s", order_id, result)
            failed.append(order_id)
        elif not result:
            logger.error("Unbilled order %s was not found for deletion", order_id)
            failed.append(order_id)
        else:
            deleted.append(order_id)
    for order_id in deleted:
        await _audit_delete(order_id, "success")
    success = not failed
    notice = Notice(
        level="success" if success else "error",
        message=BULK_DELETE_SUCCESS if success else BULK_DELETE_FAILURE,
    )
    return BulkDeleteResponse(success=success, notice=notice, deleted=deleted, failed=failed)
