# tests/test_review.py
import asyncio

from conftest import root_row
from rooty.review import ReviewSession
from rooty.session import SessionState


def test_empty_review_queue_is_caught_up(ctx):
    ctx.client.responses["rpc_get_review"] = []
    session = ReviewSession(ctx)
    assert asyncio.run(session.load()) is SessionState.CAUGHT_UP
    assert session.error is None


def test_review_error_is_an_error(ctx):
    from rooty.errors import BackendError
    ctx.client.responses["rpc_get_review"] = BackendError("Failed to load review queue")
    session = ReviewSession(ctx)
    assert asyncio.run(session.load()) is SessionState.ERROR


def test_review_submits_without_theme(ctx):
    ctx.client.responses.update({
        "rpc_get_review": [root_row(50, "fire", root_id=3, times_incorrect=2, queued_at="2025-12-01")],
        "rpc_submit_attempt": {"success": True},
    })

    async def scenario():
        session = ReviewSession(ctx)
        await session.load()
        session.submit("Fire")
        await session.wait_for_advance()
        await session.flush_attempts()
        return session

    session = asyncio.run(scenario())
    assert session.state is SessionState.COMPLETE
    assert session.summary.score == 1
    assert ctx.client.calls[0] == ("rpc_get_review", {"limit_count": 10})
    name, params = ctx.client.calls[1]
    assert params["root_id_param"] == 3
    assert params["theme_id_param"] is None
