"""
Supabase client factory
"""
from functools import lru_cache
from supabase import create_client, Client, ClientOptions

from supportdesk.config import get_settings
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Shared Supabase client for tables, storage and auth.

    Uses the service role key when configured, falling back to the anon key.
    """
    settings = get_settings()
    key = settings.supabase_service_role_key or settings.supabase_key
    options = ClientOptions(
        headers={"x-application-name": settings.application_name}
    )
    client = create_client(settings.supabase_url, key, options=options)
    logger.info(f"Supabase client created for {settings.supabase_url}")
    return client
