"""Review practice over the wrong-answer queue."""
from rooty.api import Result, get_review
from rooty.session import QuizSession, SessionState


class ReviewSession(QuizSession):
    """Practice over the wrong-answer queue. An empty queue means all caught up."""

    empty_message = "No items in your review queue. Great job!"

    def __init__(self, ctx):
        super().__init__(ctx)

    def _fetch(self, theme_id, mode, limit) -> Result:
        return get_review(self.ctx.client, limit)

    def _attempt_theme_id(self) -> int | None:
        return None

    def _on_empty(self) -> None:
        self.state = SessionState.CAUGHT_UP
        self.error = None
