"""Wrapper functions for the backend's remote procedures.

Every function returns a ``Result``. Errors are logged and handed back in
``Result.error``; nothing raises past this module.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from rooty.backend import BackendClient
from rooty.errors import BackendError, NoDataError, RootyError
from rooty.models import AttemptAck, ReviewItem, RootItem, StatsOverview, Theme, WordItem

logger = logging.getLogger(__name__)


@dataclass
class Result:
    data: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _failure(what: str, err: Exception, fallback: str) -> Result:
    logger.error("Error %s: %s", what, err)
    if isinstance(err, RootyError):
        return Result(error=err)
    # Anything else came from a malformed payload.
    return Result(error=BackendError(str(err) or fallback))


def get_themes(client: BackendClient) -> Result:
    """All themes, in the order the backend returns them."""
    try:
        data = client.rpc("rpc_get_themes")
        return Result(data=[Theme.from_row(row) for row in data or []])
    except Exception as e:
        return _failure("fetching themes", e, "Failed to load themes. Please try again later.")


def get_session(client: BackendClient, theme_id: int | None = None, limit: int = 10) -> Result:
    """A batch of root items. ``theme_id=None`` asks for a random batch across all roots.

    An empty batch is a successful, empty result.
    """
    try:
        data = client.rpc("rpc_get_session", {"theme_id_param": theme_id, "limit_count": limit})
        return Result(data=[RootItem.from_row(row) for row in data or []])
    except Exception as e:
        return _failure("fetching session roots", e, "Failed to load quiz session. Please try again.")


def get_word_session(client: BackendClient, theme_id: int | None = None, limit: int = 10) -> Result:
    try:
        data = client.rpc("rpc_get_word_session", {"theme_id_param": theme_id, "limit_count": limit})
        return Result(data=[WordItem.from_row(row) for row in data or []])
    except Exception as e:
        return _failure("fetching word session", e, "Failed to load quiz session. Please try again.")


def _ack(data) -> Result:
    if isinstance(data, list):
        data = data[0] if data else None
    if not data:
        return Result(error=NoDataError("No response from server. Please try again."))
    if not data.get("success", False):
        return Result(error=BackendError(data.get("error") or data.get("message") or "Failed to save your answer."))
    return Result(data=AttemptAck(
        success=True,
        attempt_id=data.get("attempt_id"),
        message=data.get("message") or "",
    ))


def submit_attempt(client: BackendClient, root_id: int, is_correct: bool, user_answer: str,
                   theme_id: int | None = None) -> Result:
    try:
        data = client.rpc("rpc_submit_attempt", {
            "root_id_param": root_id,
            "word_root_id_param": None,
            "theme_id_param": theme_id,
            "is_correct_param": is_correct,
            "user_answer_param": user_answer,
        })
        return _ack(data)
    except Exception as e:
        return _failure("submitting attempt", e, "Failed to save your answer. Please try again.")


def submit_word_attempt(client: BackendClient, word_id: int, selected_option: str, is_correct: bool,
                        theme_id: int | None = None) -> Result:
    try:
        data = client.rpc("rpc_submit_attempt", {
            "root_id_param": None,
            "word_root_id_param": word_id,
            "theme_id_param": theme_id,
            "is_correct_param": is_correct,
            "user_answer_param": selected_option,
        })
        return _ack(data)
    except Exception as e:
        return _failure("submitting word attempt", e, "Failed to save your answer. Please try again.")


def get_review(client: BackendClient, limit: int = 10) -> Result:
    """Roots the user previously got wrong. An empty queue is a valid result."""
    try:
        data = client.rpc("rpc_get_review", {"limit_count": limit})
        return Result(data=[ReviewItem.from_row(row) for row in data or []])
    except Exception as e:
        return _failure("fetching review queue", e, "Failed to load review queue. Please try again.")


def get_stats_overview(client: BackendClient) -> Result:
    try:
        data = client.rpc("rpc_stats_overview")
        if not data:
            return Result(error=NoDataError("No statistics data available."))
        if isinstance(data, list):
            data = data[0]
        if not data.get("success", True):
            return Result(error=BackendError(data.get("error") or "Failed to load stats"))
        return Result(data=StatsOverview(
            total_attempts=int(data.get("total_attempts") or 0),
            correct_attempts=int(data.get("correct_attempts") or 0),
            accuracy_percent=float(data.get("accuracy_percent") or 0),
            roots_learned=int(data.get("roots_learned") or 0),
            current_streak=int(data.get("current_streak") or 0),
        ))
    except Exception as e:
        return _failure("fetching stats", e, "Failed to load statistics. Please try again.")

