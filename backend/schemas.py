from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class DoctorItem(BaseModel):
    id: str
    name: str


class DoctorListResponse(BaseModel):
    items: List[DoctorItem]
    error: Optional[str] = None


class UnbilledOrderRow(BaseModel):
    id: str
    serialNo: str
    name: str
    referredBy: Optional[str]
    doctor_name: str
    category: Optional[str]
    subcategory: Optional[str]
    paymentMode: Optional[str]
    finalPayment: Optional[float]
    createdAt: Optional[datetime]
    raw: Optional[Dict[str, Any]] = None


class UnbilledListResponse(BaseModel):
    items: List[UnbilledOrderRow]
    total: int
    error: Optional[str] = None


class UnbilledOrderEdit(BaseModel):
    """Full replacement record submitted from the edit form."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    serialNo: Optional[str] = None
    name: Optional[str] = None
    referredBy: Optional[Union[str, Dict[str, Any]]] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    paymentMode: str = Field(..., description="'Unbilled' keeps the record unbilled")
    finalPayment: Optional[float] = None

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Notice(BaseModel):
    level: Literal["success", "error"]
    message: str


EditOutcome = Literal["updated", "migrated", "failed", "orphaned"]


class EditOrderResult(BaseModel):
    success: bool
    outcome: EditOutcome
    notice: Notice
    order: Optional[Dict[str, Any]] = None
    refresh_list: bool = False
    redirect_to: Optional[str] = None
    orphaned_record: Optional[Dict[str, Any]] = None


class BulkDeleteRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    success: bool
    notice: Notice
    deleted: List[str]
    failed: List[str]


class HealthResponse(BaseModel):
    status: str
    billing_api_url: str
    audit_enabled: bool
