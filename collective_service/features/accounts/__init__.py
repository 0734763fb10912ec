"""Account helpers.

Usage:
    from collective_service.features.accounts import fetch_account_id

    account_id = await fetch_account_id(cache, "opencollective", repository.id_for_slug)
"""

from __future__ import annotations

from .lookup import ACCOUNT_ID_KEY_PREFIX, account_id_cache_key, fetch_account_id
from .models import AccountRef

__all__ = [
    "ACCOUNT_ID_KEY_PREFIX",
    "AccountRef",
    "account_id_cache_key",
    "fetch_account_id",
]
