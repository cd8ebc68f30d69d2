# Infrastructure adapters
from .review_store import FrontmatterReviewStore
from .session_store import JsonSessionStore
from .vault_store import VaultFileStore

__all__ = ["VaultFileStore", "FrontmatterReviewStore", "JsonSessionStore"]
