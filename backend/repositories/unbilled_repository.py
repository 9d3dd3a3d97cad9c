import httpx

from repositories.http_repository import HttpRecordRepository

UNBILLED_PATH = "/unbilled"


def unbilled_repository(client: httpx.Client) -> HttpRecordRepository:
    return HttpRecordRepository(
        client,
        UNBILLED_PATH,
        list_keys=("unbilled", "orders", "data"),
        record_keys=("unbilled", "order", "data"),
    )
