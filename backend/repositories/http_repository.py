from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from billing_client import BillingApiError, request_json
from repositories.base import RecordRepository


def _extract_items(payload: Any, keys: Sequence[str]) -> List[Dict[str, Any]]:
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if not isinstance(payload, dict):
        return []
    for key in keys:
        items = payload.get(key)
        if isinstance(items, list):
            return [item for item in items if isinstance(item, dict)]
    return []


def _extract_record(payload: Any, keys: Sequence[str]) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        return {}
    for key in keys:
        record = payload.get(key)
        if isinstance(record, dict):
            return record
    return payload


class HttpRecordRepository(RecordRepository):
    def __init__(
        self,
        client: httpx.Client,
        path: str,
        *,
        list_keys: Sequence[str] = ("data",),
        record_keys: Sequence[str] = ("data",),
    ) -> None:
        self.client = client
        self.path = path.rstrip("/")
        self.list_keys = tuple(list_keys)
        self.record_keys = tuple(record_keys)

    def _item_path(self, record_id: str) -> str:
        return f"{self.path}/{quote(str(record_id), safe='')}"

    def list(self) -> List[Dict[str, Any]]:
        payload = request_json(self.client, "GET", self.path)
        return _extract_items(payload, self.list_keys)

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        try:
            payload = request_json(self.client, "GET", self._item_path(record_id))
        except BillingApiError as exc:
            if exc.is_not_found:
                return None
            raise
        record = _extract_record(payload, self.record_keys)
        return record or None

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        payload = request_json(self.client, "POST", self.path, json=record)
        return _extract_record(payload, self.record_keys)

    def update(self, record_id: str, record: Dict[str, Any]) -> Dict[str, Any]:
        payload = request_json(
            self.client, "PUT", self._item_path(record_id), json=record
        )
        return _extract_record(payload, self.record_keys) or record

    def delete(self, record_id: str) -> bool:
        try:
            request_json(self.client, "DELETE", self._item_path(record_id))
        except BillingApiError as exc:
            if exc.is_not_found:
                return False
            raise
        return True
