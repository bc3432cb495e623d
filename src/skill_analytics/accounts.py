# ABOUTME: Thin read views over an account's profile and earned growth milestones.
# ABOUTME: Missing profiles are reported as not found rather than raised.

from __future__ import annotations

import logging
from typing import Dict, Optional

from src.event_store.base import EventStore

logger = logging.getLogger(__name__)

DEFAULT_MILESTONE_LIMIT = 50


def get_user_profile(store: EventStore, account_id: str) -> Dict:
    logger.info("Executing get_user_profile", extra={"account_id": account_id})
    profile = store.get_user_profile(account_id)
    if profile is None:
        return {"found": False, "message": f'User profile for accountId "{account_id}" not found'}
    return {"found": True, "profile": profile.to_dict()}


def get_growth_milestones(store: EventStore, account_id: str, limit: Optional[int] = None) -> Dict:
    milestones = store.get_growth_milestones_by_user(account_id, limit=limit or DEFAULT_MILESTONE_LIMIT)
    logger.info("get_growth_milestones completed", extra={"account_id": account_id, "count": len(milestones)})
    return {
        "accountId": account_id,
        "count": len(milestones),
        "milestones": [m.to_dict() for m in milestones],
    }
