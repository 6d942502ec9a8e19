from .base import CategoryQuery, RowStore
from .memory import InMemoryRowStore
from .supabase_client import SupabaseRowStore

__all__ = ["CategoryQuery", "RowStore", "InMemoryRowStore", "SupabaseRowStore"]
