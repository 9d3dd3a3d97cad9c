import httpx

from repositories.http_repository import HttpRecordRepository

# Billed orders; POST assigns a fresh _id and serialNo.
ORDERS_PATH = "/orders"


def orders_repository(client: httpx.Client) -> HttpRecordRepository:
    return HttpRecordRepository(
        client,
        ORDERS_PATH,
        list_keys=("orders", "data"),
        record_keys=("order", "data"),
    )
