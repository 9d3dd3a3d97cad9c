import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from billing_client import BillingApiError
from repositories.base import RecordRepository
from schemas import DoctorItem, EditOrderResult, Notice, UnbilledOrderRow
from services import unbilled_service
from services.doctors_service import doctor_names, get_doctors
from services.filtering import DateRange, filter_orders
from services.migration_service import OrderMigrationWorkflow
from services.selection import SelectionState

logger = logging.getLogger("unbilled-panel")

CONFIRM_DELETE_ONE = "Are you sure you want to delete this unbilled order?"
CONFIRM_DELETE_SELECTED = "Are you sure you want to delete the selected orders?"

ConfirmFn = Callable[[str], bool]
NotifyFn = Callable[[Notice], None]
NavigateFn = Callable[[str], None]


class UnbilledScreen:
    """State of the unbilled transactions screen, independent of any renderer.

    Deletes are gated by ``confirm``; every mutating action reports through
    ``notify``; a successful migration calls ``navigate`` with the report path.
    """

    def __init__(
        self,
        unbilled: RecordRepository,
        billed: RecordRepository,
        doctors: RecordRepository,
        *,
        confirm: ConfirmFn,
        notify: NotifyFn,
        navigate: Optional[NavigateFn] = None,
        workflow: Optional[OrderMigrationWorkflow] = None,
    ) -> None:
        self.unbilled_repo = unbilled
        self.doctors_repo = doctors
        self.workflow = workflow or OrderMigrationWorkflow(unbilled, billed)
        self.confirm = confirm
        self.notify = notify
        self.navigate = navigate or (lambda path: None)

        self.orders: List[UnbilledOrderRow] = []
        self.doctors: List[DoctorItem] = []
        self.loading = False
        self.error: Optional[str] = None
        self.doctors_error: Optional[str] = None

        self.search_query = ""
        self.pending_range = DateRange.today()
        self.applied_range: Optional[DateRange] = None
        self.selection = SelectionState()

    async def load_doctors(self) -> None:
        response = await get_doctors(self.doctors_repo)
        self.doctors = response.items
        self.doctors_error = response.error

    async def refresh(self) -> None:
        self.loading = True
        try:
            loaded = await unbilled_service.fetch_unbilled_rows(
                self.unbilled_repo, doctor_names(self.doctors)
            )
        finally:
            self.loading = False
        self.orders = loaded.items
        self.error = loaded.error or self.doctors_error
        self.selection.retain(order.id for order in self.orders)

    async def load(self) -> None:
        await self.load_doctors()
        await self.refresh()

    @property
    def filter_applied(self) -> bool:
        return self.applied_range is not None

    @property
    def filtered(self) -> List[UnbilledOrderRow]:
        return filter_orders(self.orders, self.search_query, self.applied_range)

    def set_search(self, query: str) -> None:
        self.search_query = query or ""

    def set_date_range(self, start: date, end: date) -> None:
        self.pending_range = DateRange(start=start, end=end)

    def apply_date_filter(self) -> None:
        self.applied_range = self.pending_range

    def reset_date_filter(self) -> None:
        self.pending_range = DateRange.today()
        self.applied_range = None

    def toggle(self, order_id: str) -> bool:
        return self.selection.toggle(order_id)

    def toggle_all(self) -> None:
        self.selection.toggle_all(order.id for order in self.filtered)

    def view(self, order_id: str) -> Optional[UnbilledOrderRow]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def _success(self, message: str) -> None:
        self.notify(Notice(level="success", message=message))

    def _error(self, message: str) -> None:
        self.notify(Notice(level="error", message=message))

    async def delete_order(self, order_id: str) -> bool:
        if not self.confirm(CONFIRM_DELETE_ONE):
            return False
        try:
            deleted = await unbilled_service.delete_unbilled(self.unbilled_repo, order_id)
        except BillingApiError as exc:
            logger.error("Error deleting order %s: %s", order_id, exc)
            deleted = False
        if not deleted:
            self._error(unbilled_service.DELETE_FAILURE)
            return False
        self.orders = [order for order in self.orders if order.id != order_id]
        self.selection.retain(order.id for order in self.orders)
        self._success(unbilled_service.DELETE_SUCCESS)
        return True

    async def delete_selected(self) -> bool:
        if not len(self.selection) or not self.confirm(CONFIRM_DELETE_SELECTED):
            return False
        result = await unbilled_service.delete_many(
            self.unbilled_repo, self.selection.selected
        )
        removed = set(result.deleted)
        self.orders = [order for order in self.orders if order.id not in removed]
        self.selection.clear()
        self.notify(result.notice)
        return result.success

    async def submit_edit(self, order_id: str, edited: Dict[str, Any]) -> EditOrderResult:
        result = await self.workflow.submit_edit(order_id, edited)
        self.notify(result.notice)
        if result.outcome in ("migrated", "orphaned"):
            self.orders = [order for order in self.orders if order.id != order_id]
            self.selection.retain(order.id for order in self.orders)
        if result.refresh_list:
            await self.refresh()
        if result.outcome == "migrated" and result.redirect_to:
            self.navigate(result.redirect_to)
        return result
