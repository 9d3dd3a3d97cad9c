from typing import Optional

from supabase import Client, create_client

from config import settings


def _create_supabase() -> Optional[Client]:
    if not settings.audit_enabled:
        return None
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


supabase: Optional[Client] = _create_supabase()
