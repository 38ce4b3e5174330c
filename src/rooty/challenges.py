"""Daily challenge completion tracking and promotional theme lookup.

Completion lives in local storage under a single key holding
``{"completed": [...], "date": "<iso timestamp>"}``. Every read and write is
best-effort: failures are logged and never reach the caller.
"""
import json
import logging
from datetime import datetime

from rooty import db
from rooty.api import get_themes

logger = logging.getLogger(__name__)

CHALLENGE_STORAGE_KEY = "rooty_daily_challenges"


class ChallengeTracker:
    def __init__(self, db_path: str, total: int = 4):
        self.db_path = db_path
        self.total = total

    def get_completed(self) -> set[int]:
        try:
            stored = db.get_item(self.db_path, CHALLENGE_STORAGE_KEY)
            if not stored:
                return set()
            data = json.loads(stored)
            return {int(n) for n in data.get("completed") or []}
        except Exception as e:
            logger.error("Error reading completed challenges: %s", e)
            return set()

    def mark_complete(self, number: int) -> None:
        completed = self.get_completed()
        if number in completed:
            return
        completed.add(number)
        try:
            db.set_item(self.db_path, CHALLENGE_STORAGE_KEY, json.dumps({
                "completed": sorted(completed),
                "date": datetime.now().isoformat(),
            }))
        except Exception as e:
            logger.error("Error marking challenge complete: %s", e)

    def all_complete(self, total: int | None = None) -> bool:
        total = self.total if total is None else total
        return set(range(1, total + 1)) <= self.get_completed()

    def is_valid(self, number) -> bool:
        return isinstance(number, int) and 1 <= number <= self.total

    def reset(self) -> None:
        try:
            db.remove_item(self.db_path, CHALLENGE_STORAGE_KEY)
        except Exception as e:
            logger.error("Error resetting challenges: %s", e)


class ThemeCache:
    """Resolves a theme id by name once, then serves it from memory."""

    def __init__(self, theme_name: str):
        self.theme_name = theme_name
        self._theme_id: int | None = None

    def get_theme_id(self, client) -> int | None:
        if self._theme_id is not None:
            return self._theme_id
        result = get_themes(client)
        if result.error or not result.data:
            return None
        for theme in result.data:
            if theme.name == self.theme_name:
                self._theme_id = theme.id
                return theme.id
        return None

    def clear(self) -> None:
        self._theme_id = None
