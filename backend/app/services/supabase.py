from ..config import get_settings


class ReceiptStoreError(Exception):
    """The Supabase store could not complete an operation."""


def check_configured() -> None:
    """Raise ReceiptStoreError unless Supabase credentials are set."""
    if not get_settings().supabase_configured:
        raise ReceiptStoreError("Receipt store is not configured")


async def get_supabase_headers() -> dict[str, str]:
    """Get headers for Supabase REST API calls."""
    settings = get_settings()
    return {
        "apikey": settings.supabase_service_key,
        "Authorization": f"Bearer {settings.supabase_service_key}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def table_url(table: str) -> str:
    """PostgREST endpoint for a table."""
    return f"{get_settings().supabase_url}/rest/v1/{table}"
