import asyncio
import logging
from typing import Any, Dict, Iterable

from billing_client import BillingApiError
from repositories.base import RecordRepository
from schemas import DoctorItem, DoctorListResponse

logger = logging.getLogger("unbilled-panel")

UNKNOWN_DOCTOR = "None"


def _format_doctor(raw: Dict[str, Any]) -> DoctorItem:
    return DoctorItem(
        id=str(raw.get("_id") or raw.get("id") or ""),
        name=str(raw.get("name") or ""),
    )


async def get_doctors(repo: RecordRepository) -> DoctorListResponse:
    try:
        rows = await asyncio.to_thread(repo.list)
    except BillingApiError as exc:
        logger.warning("Error fetching doctors: %s", exc)
        return DoctorListResponse(items=[], error=str(exc))
    doctors = [_format_doctor(row) for row in rows]
    return DoctorListResponse(items=[doctor for doctor in doctors if doctor.id])


def doctor_names(doctors: Iterable[DoctorItem]) -> Dict[str, str]:
    return {doctor.id: doctor.name for doctor in doctors}


def resolve_doctor_name(names: Dict[str, str], doctor_id: Any) -> str:
    if doctor_id is None:
        return UNKNOWN_DOCTOR
    return names.get(str(doctor_id), UNKNOWN_DOCTOR)
