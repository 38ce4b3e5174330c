"""Quiz session controller.

A session fetches one batch of items, shows them one at a time, grades each
answer locally, and moves on after a short pause. Each attempt is sent to the
backend in the background; a slow or failed submission never holds up the
quiz. Everything runs on one asyncio loop; blocking HTTP calls go through
``asyncio.to_thread``.
"""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from functools import partial

from rooty.api import Result, get_session, get_word_session, submit_attempt, submit_word_attempt
from rooty.dashboard import get_score_message
from rooty.errors import RootyError, TransportError
from rooty.models import ItemKind
from rooty.navigation import Route, require_user
from rooty.quiz import Feedback, QuizCard

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"
    COMPLETE = "complete"
    CAUGHT_UP = "caught_up"


class ItemPhase(str, Enum):
    ANSWERING = "answering"
    SUBMITTED = "submitted"


class QuizMode(str, Enum):
    ROOTS = "roots"
    WORDS = "words"


@dataclass
class SessionSummary:
    score: int
    total: int
    percentage: int
    message: str


def score_percentage(score: int, total: int) -> int:
    """Whole-number percentage, halves rounded up."""
    if total == 0:
        return 0
    return math.floor(score / total * 100 + 0.5)


def _discard_late_result(fut: asyncio.Future) -> None:
    if fut.cancelled():
        return
    if fut.exception() is not None:
        logger.debug("Late batch fetch failed after timeout: %s", fut.exception())
    else:
        logger.debug("Discarding batch that arrived after timeout")


class QuizSession:
    empty_message = "No roots available for this session."

    def __init__(self, ctx, theme_id: int | None = None, challenge: int | None = None,
                 mode: QuizMode = QuizMode.ROOTS):
        self.ctx = ctx
        self.theme_id = theme_id
        self.challenge = challenge
        self.mode = mode
        self.state = SessionState.LOADING
        self.error: str | None = None
        self.items: list = []
        self.index = 0
        self.score = 0
        self.answered = 0
        self.card: QuizCard | None = None
        self.summary: SessionSummary | None = None
        self._timers: dict[asyncio.Future, asyncio.TimerHandle] = {}
        self._advance_timer: asyncio.Future | None = None
        self._attempts: set[asyncio.Future] = set()
        self._load_seq = 0
        self._closed = False

    @property
    def challenge_mode(self) -> bool:
        return self.challenge is not None and self.ctx.challenges.is_valid(self.challenge)

    @property
    def phase(self) -> ItemPhase | None:
        if self.state is not SessionState.READY or self.card is None:
            return None
        return ItemPhase.SUBMITTED if self.card.locked else ItemPhase.ANSWERING

    @property
    def current(self):
        return self.card.item if self.card else None

    @property
    def total(self) -> int:
        return len(self.items)

    def _fetch(self, theme_id, mode, limit) -> Result:
        if mode is QuizMode.WORDS:
            return get_word_session(self.ctx.client, theme_id, limit)
        return get_session(self.ctx.client, theme_id, limit)

    def _attempt_theme_id(self) -> int | None:
        return self.theme_id

    def _on_empty(self) -> None:
        self._fail(self.empty_message)

    def _fail(self, message: str) -> None:
        self.state = SessionState.ERROR
        self.error = message

    def _reset(self) -> None:
        self._cancel_timers()
        self.state = SessionState.LOADING
        self.error = None
        self.items = []
        self.index = 0
        self.score = 0
        self.answered = 0
        self.card = None
        self.summary = None

    async def load(self) -> SessionState:
        """Fetch a fresh batch, giving up after the configured timeout."""
        if not require_user(self.ctx.auth, self.ctx.navigator):
            return self.state
        self._reset()
        self._load_seq += 1
        seq = self._load_seq
        settings = self.ctx.settings

        fetch = asyncio.ensure_future(
            asyncio.to_thread(self._fetch, self.theme_id, self.mode, settings.batch_size)
        )
        done, _ = await asyncio.wait({fetch}, timeout=settings.load_timeout)
        if seq != self._load_seq or self._closed:
            # A newer load or close() took over while we waited.
            fetch.add_done_callback(_discard_late_result)
            return self.state
        if not done:
            fetch.add_done_callback(_discard_late_result)
            err = TransportError("The quiz took too long to load. Please try again.")
            logger.error("Error loading session: %s", err)
            self._fail(str(err))
            return self.state

        try:
            result = fetch.result()
        except Exception as e:
            logger.error("Error loading session: %s", e)
            self._fail(str(e) or "Failed to load session")
            return self.state
        if result.error:
            logger.error("Error loading session: %s", result.error)
            self._fail(str(result.error))
            return self.state
        if not result.data:
            self._on_empty()
            return self.state

        self.items = list(result.data)
        self._show(0)
        self.state = SessionState.READY
        logger.info("Loaded %d %s items (theme=%s)", len(self.items), self.mode.value, self.theme_id)
        return self.state

    async def retry(self) -> SessionState:
        return await self.load()

    async def select(self, theme_id: int | None = None, mode: QuizMode | None = None) -> SessionState:
        """Change the theme or quiz mode and start over with a new batch."""
        self.theme_id = theme_id
        if mode is not None:
            self.mode = mode
        return await self.load()

    def _show(self, index: int) -> None:
        self.index = index
        self.card = QuizCard(self.items[index], rng=self.ctx.rng)

    def submit(self, answer: str) -> Feedback:
        """Grade the current item and schedule the move to the next one."""
        if self.state is not SessionState.READY or self.card is None:
            raise RootyError(f"cannot answer while session is {self.state.value}")
        feedback = self.card.submit(answer)
        if feedback.is_correct:
            self.score += 1
        self.answered += 1
        self._persist(self.card.item, feedback)
        self._advance_timer = self._schedule(self.ctx.settings.advance_delay, self._advance)
        return feedback

    def _persist(self, item, feedback: Feedback) -> None:
        client = self.ctx.client
        if item.kind is ItemKind.WORD:
            call = partial(submit_word_attempt, client, item.id, feedback.user_answer,
                           feedback.is_correct, self._attempt_theme_id())
        else:
            call = partial(submit_attempt, client, item.id, feedback.is_correct,
                           feedback.user_answer, self._attempt_theme_id())
        task = asyncio.ensure_future(asyncio.to_thread(call))
        self._attempts.add(task)
        task.add_done_callback(self._attempt_done)

    def _attempt_done(self, task: asyncio.Future) -> None:
        self._attempts.discard(task)
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.warning("Error submitting attempt: %s", task.exception())
        elif task.result().error:
            logger.warning("Error submitting attempt: %s", task.result().error)

    def _advance(self) -> None:
        self._advance_timer = None
        if self.index + 1 < len(self.items):
            self._show(self.index + 1)
        else:
            self._complete()

    def _complete(self) -> None:
        self.state = SessionState.COMPLETE
        pct = score_percentage(self.score, len(self.items))
        self.summary = SessionSummary(
            score=self.score, total=len(self.items), percentage=pct, message=get_score_message(pct),
        )
        logger.info("Session complete: %d/%d (%d%%)", self.score, len(self.items), pct)
        if self.challenge_mode:
            self.ctx.challenges.mark_complete(self.challenge)
            self._schedule(self.ctx.settings.completion_delay, partial(self.ctx.navigator.go, Route.HOME))

    def _schedule(self, delay: float, callback) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        fired = loop.create_future()

        def run():
            self._timers.pop(fired, None)
            try:
                callback()
            finally:
                if not fired.done():
                    fired.set_result(None)

        self._timers[fired] = loop.call_later(delay, run)
        return fired

    def _cancel_timers(self) -> None:
        for fired, handle in list(self._timers.items()):
            handle.cancel()
            fired.cancel()
        self._timers.clear()
        self._advance_timer = None

    async def wait_for_advance(self) -> None:
        """Wait until the pause after an answer is over."""
        if self._advance_timer is not None:
            await asyncio.wait({self._advance_timer})

    async def settle(self) -> None:
        """Wait for every pending timer, including the post-completion redirect."""
        while self._timers:
            await asyncio.wait(set(self._timers))

    async def flush_attempts(self) -> None:
        """Wait for background submissions; their outcome is only logged."""
        if self._attempts:
            await asyncio.wait(set(self._attempts))

    def close(self) -> None:
        """Tear down: pending timers are cancelled, submissions run to completion."""
        self._closed = True
        self._cancel_timers()
