"""Logical destinations, the navigator, and the signed-in guard."""
import logging
from enum import Enum
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)


class Route(str, Enum):
    AUTH = "auth"
    HOME = "home"
    LEARN = "learn"
    SESSION = "session"
    REVIEW = "review"
    PROFILE = "profile"


class Navigator:
    def __init__(self, start: Route = Route.HOME):
        self.current = start
        self.params: dict = {}
        self.history: list[tuple[Route, dict]] = []

    def go(self, route: Route, **params) -> None:
        logger.debug("navigate %s %s", route.value, params)
        self.history.append((self.current, self.params))
        self.current = route
        self.params = params


def require_user(auth, navigator: Navigator) -> bool:
    """Send anonymous users to the auth view. Returns True when someone is signed in."""
    if auth.user is None:
        navigator.go(Route.AUTH)
        return False
    return True


def _int_param(values: list) -> int | None:
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


def parse_session_query(query: str) -> dict:
    """Read ``theme`` and ``challenge`` from a session deep link query string."""
    parsed = parse_qs(query.lstrip("?"))
    return {
        "theme_id": _int_param(parsed.get("theme")),
        "challenge": _int_param(parsed.get("challenge")),
    }
