from fastapi import APIRouter, Depends

from api.deps import get_doctors_repository
from repositories.base import RecordRepository
from schemas import DoctorListResponse
from services.doctors_service import get_doctors

router = APIRouter(prefix="/api/doctors", tags=["doctors"])


@router.get("", response_model=DoctorListResponse)
async def list_doctors(
    repo: RecordRepository = Depends(get_doctors_repository),
) -> DoctorListResponse:
    return await get_doctors(repo)
