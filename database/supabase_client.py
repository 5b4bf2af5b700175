"""
Supabase client

Server-side clients never persist or auto-refresh a session: every request
carries the member's own access token, so row-level security on the
`events` table sees the right `auth.uid()`.
"""
from typing import Optional

from supabase import Client, ClientOptions, create_client

from portal.config import get_settings


def create_supabase_client(access_token: Optional[str] = None) -> Client:
    """
    Create a Supabase client

    Args:
        access_token: member JWT; when given, PostgREST calls run as that member

    Returns:
        a fresh client with no stored session
    """
    settings = get_settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError("Set the SUPABASE_URL and SUPABASE_KEY environment variables")

    client = create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_KEY,
        options=ClientOptions(persist_session=False, auto_refresh_token=False),
    )
    if access_token:
        client.postgrest.auth(access_token)
    return client
