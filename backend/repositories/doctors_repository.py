import httpx

from repositories.http_repository import HttpRecordRepository

DOCTORS_PATH = "/doctors"


def doctors_repository(client: httpx.Client) -> HttpRecordRepository:
    return HttpRecordRepository(
        client,
        DOCTORS_PATH,
        list_keys=("doctors", "data"),
        record_keys=("doctor", "data"),
    )
