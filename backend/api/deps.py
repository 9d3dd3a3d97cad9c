from typing import Iterator

import httpx
from fastapi import Depends, HTTPException, status

from auth import get_access_token
from billing_client import BillingApiError, create_billing_client
from repositories.base import RecordRepository
from repositories.doctors_repository import doctors_repository
from repositories.orders_repository import orders_repository
from repositories.unbilled_repository import unbilled_repository


def get_billing_client(token: str = Depends(get_access_token)) -> Iterator[httpx.Client]:
    client = create_billing_client(token)
    try:
        yield client
    finally:
        client.close()


def get_unbilled_repository(
    client: httpx.Client = Depends(get_billing_client),
) -> RecordRepository:
    return unbilled_repository(client)


def get_orders_repository(
    client: httpx.Client = Depends(get_billing_client),
) -> RecordRepository:
    return orders_repository(client)


def get_doctors_repository(
    client: httpx.Client = Depends(get_billing_client),
) -> RecordRepository:
    return doctors_repository(client)


def upstream_error(exc: BillingApiError) -> HTTPException:
    if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        return HTTPException(status_code=exc.status_code, detail=str(exc))
    if exc.is_not_found:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
