from typing import Optional
from supabase import create_client, Client
from recipe_finder.settings import Settings


def get_supabase(settings: Optional[Settings] = None) -> Client:
    settings = settings or Settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase storage backend")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
