from typing import Any, Dict, Optional

from supabase_client import supabase

ORDER_LOG_TABLE = "order_action_log"


def log_action(
    order_id: str,
    action: str,
    *,
    request: Optional[Dict[str, Any]] = None,
    response: Optional[Dict[str, Any]] = None,
    status: Optional[str] = None,
) -> bool:
    if supabase is None:
        return False
    record = {
        "order_id": order_id,
        "action": action,
        "request": request or {},
        "response": response or {},
        "status": status or "success",
    }
    supabase.table(ORDER_LOG_TABLE).insert(record).execute()
    return True
