from typing import Any, Dict, Optional
from supabase import create_client, Client
from mall_admin.config.settings import settings


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Client with the anon key; row-level security applies. Use for read paths."""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Only reachable after a permission gate."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def first_row(result) -> Optional[Dict[str, Any]]:
    """First row of a query response, or None. Accepts list and single-object payloads."""
    if result is None:
        return None
    data = result.data
    if isinstance(data, list):
        return data[0] if data else None
    return data or None
