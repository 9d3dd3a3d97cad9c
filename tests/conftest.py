"""
Shared fixtures for the unbilled panel tests.

Settings are read from the environment at import time, so the billing API
location is pinned here before any application module is imported.
Install with: pip install -e ".[test]"
"""

import itertools
import os
import threading

os.environ["BILLING_API_URL"] = "http://billing.test/api"
os.environ["DISPLAY_TIMEZONE"] = "UTC"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_SERVICE_ROLE_KEY", None)

import pytest  # noqa: E402

from billing_client import BillingApiError  # noqa: E402
from repositories.base import RecordRepository  # noqa: E402


class FakeRepository(RecordRepository):
    """In-memory collection that records every call in a shared log."""

    def __init__(self, name, records=(), *, log=None, fail_on=()):
        self.name = name
        self.records = {record["_id"]: dict(record) for record in records}
        self.log = log if log is not None else []
        self.fail_on = set(fail_on)
        self.payloads = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _call(self, op, record_id=None):
        with self._lock:
            self.log.append((self.name, op, record_id))
        if op in self.fail_on or (op, record_id) in self.fail_on:
            raise BillingApiError(f"{op} {record_id} failed", status_code=500)

    def calls(self, op=None):
        return [entry for entry in self.log if entry[0] == self.name and op in (None, entry[1])]

    def list(self):
        self._call("list")
        return [dict(record) for record in self.records.values()]

    def get(self, record_id):
        self._call("get", record_id)
        record = self.records.get(record_id)
        return dict(record) if record else None

    def create(self, record):
        self._call("create")
        self.payloads.append(dict(record))
        number = next(self._ids)
        created = {**record, "_id": f"{self.name}-{number}", "serialNo": f"OR-{number:04d}"}
        self.records[created["_id"]] = created
        return dict(created)

    def update(self, record_id, record):
        self._call("update", record_id)
        self.payloads.append(dict(record))
        self.records[record_id] = {**record, "_id": record_id}
        return dict(self.records[record_id])

    def delete(self, record_id):
        self._call("delete", record_id)
        return self.records.pop(record_id, None) is not None


DOCTORS = [
    {"_id": "d1", "name": "Dr. Alice Smith"},
    {"_id": "d2", "name": "Dr. Bob Jones"},
]

UNBILLED = [
    {
        "_id": "A",
        "serialNo": "UB-0001",
        "name": "Jane Doe",
        "referredBy": "d1",
        "category": "Radiology",
        "subcategory": "X-Ray",
        "paymentMode": "Unbilled",
        "finalPayment": "1500",
        "createdAt": "2024-03-01T09:30:00.000Z",
    },
    {
        "_id": "B",
        "serialNo": "UB-0002",
        "name": "John Roe",
        "referredBy": "d2",
        "category": "Pathology",
        "subcategory": "CBC",
        "paymentMode": "Unbilled",
        "finalPayment": 400,
        "createdAt": "2024-03-05T23:45:00.000Z",
    },
    {
        "_id": "C",
        "serialNo": "UB-0003",
        "name": "Mary Major",
        "referredBy": "d9",
        "category": "Radiology",
        "subcategory": "MRI",
        "paymentMode": "Unbilled",
        "finalPayment": 9000,
        "createdAt": "2024-03-10T12:00:00.000Z",
    },
]


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def unbilled_repo(call_log):
    return FakeRepository("unbilled", UNBILLED, log=call_log)


@pytest.fixture
def billed_repo(call_log):
    return FakeRepository("billed", log=call_log)


@pytest.fixture
def doctors_repo(call_log):
    return FakeRepository("doctors", DOCTORS, log=call_log)
