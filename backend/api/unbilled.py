from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from api.deps import (
    get_doctors_repository,
    get_orders_repository,
    get_unbilled_repository,
    upstream_error,
)
from billing_client import BillingApiError
from repositories.base import RecordRepository
from schemas import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    EditOrderResult,
    UnbilledListResponse,
    UnbilledOrderEdit,
    UnbilledOrderRow,
)
from services import unbilled_service
from services.filtering import DateRange
from services.migration_service import OrderMigrationWorkflow

router = APIRouter(prefix="/api/unbilled", tags=["unbilled"])


def _date_range(start_date: Optional[date], end_date: Optional[date]) -> Optional[DateRange]:
    if start_date is None and end_date is None:
        return None
    if start_date is None or end_date is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date and end_date must be provided together",
        )
    try:
        return DateRange(start=start_date, end=end_date)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


@router.get("", response_model=UnbilledListResponse)
async def list_unbilled(
    q: str = Query(default="", description="Name, doctor or serial number"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    unbilled_repo: RecordRepository = Depends(get_unbilled_repository),
    doctors_repo: RecordRepository = Depends(get_doctors_repository),
) -> UnbilledListResponse:
    date_range = _date_range(start_date, end_date)
    return await unbilled_service.list_unbilled(
        unbilled_repo, doctors_repo, search=q, date_range=date_range
    )


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete(
    payload: BulkDeleteRequest,
    unbilled_repo: RecordRepository = Depends(get_unbilled_repository),
) -> BulkDeleteResponse:
    return await unbilled_service.delete_many(unbilled_repo, payload.ids)


@router.get("/{order_id}", response_model=UnbilledOrderRow)
async def read_unbilled(
    order_id: str,
    unbilled_repo: RecordRepository = Depends(get_unbilled_repository),
    doctors_repo: RecordRepository = Depends(get_doctors_repository),
) -> UnbilledOrderRow:
    try:
        row = await unbilled_service.get_unbilled(unbilled_repo, doctors_repo, order_id)
    except BillingApiError as exc:
        raise upstream_error(exc) from exc
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return row


@router.put(
    "/{order_id}",
    response_model=EditOrderResult,
    responses={status.HTTP_502_BAD_GATEWAY: {"model": EditOrderResult}},
)
async def edit_unbilled(
    order_id: str,
    payload: UnbilledOrderEdit,
    unbilled_repo: RecordRepository = Depends(get_unbilled_repository),
    orders_repo: RecordRepository = Depends(get_orders_repository),
):
    workflow = OrderMigrationWorkflow(unbilled_repo, orders_repo)
    result = await workflow.submit_edit(order_id, payload.to_record())
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=jsonable_encoder(result),
        )
    return result


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_unbilled(
    order_id: str,
    unbilled_repo: RecordRepository = Depends(get_unbilled_repository),
) -> Response:
    try:
        deleted = await unbilled_service.delete_unbilled(unbilled_repo, order_id)
    except BillingApiError as exc:
        error = upstream_error(exc)
        if error.status_code == status.HTTP_502_BAD_GATEWAY:
            error.detail = unbilled_service.DELETE_FAILURE
        raise error from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
