"""Load the bundled sample roots into the backend's roots table."""
import json
import logging
from pathlib import Path

from rooty.backend import BackendClient
from rooty.errors import ConfigError

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"


def load_seed_roots(path: Path | None = None) -> list[dict]:
    data = json.loads((path or CONTENT_DIR / "roots.json").read_text(encoding="utf-8"))
    return data["roots"]


def is_seeded(client: BackendClient) -> bool:
    """Check whether the roots table already has rows."""
    return len(client.select("roots")) > 0


def seed_roots(settings, path: Path | None = None) -> int:
    """Insert sample roots using the service-role key. Returns the number inserted, 0 if already seeded."""
    if not settings.supabase_service_key:
        raise ConfigError("Seeding needs ROOTY_SUPABASE_SERVICE_KEY")
    client = BackendClient(settings.supabase_url, settings.supabase_service_key, timeout=settings.http_timeout)
    if is_seeded(client):
        logger.info("Roots table already has data, skipping seed")
        return 0
    roots = load_seed_roots(path)
    client.insert("roots", roots)
    logger.info("Seeded %d roots", len(roots))
    return len(roots)
