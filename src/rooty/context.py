"""Per-run application context handed to controllers."""
import random
from dataclasses import dataclass, field

from rooty.backend import AuthClient, BackendClient
from rooty.challenges import ChallengeTracker, ThemeCache
from rooty.config import Settings
from rooty.db import init_db
from rooty.navigation import Navigator


@dataclass
class AppContext:
    settings: Settings
    client: BackendClient
    auth: AuthClient
    challenges: ChallengeTracker
    theme_cache: ThemeCache
    navigator: Navigator = field(default_factory=Navigator)
    rng: random.Random = field(default_factory=random.Random)


def build_context(settings: Settings) -> AppContext:
    init_db(settings.db_path)
    client = BackendClient(settings.supabase_url, settings.supabase_anon_key, timeout=settings.http_timeout)
    return AppContext(
        settings=settings,
        client=client,
        auth=AuthClient(client, settings.db_path),
        challenges=ChallengeTracker(settings.db_path, total=settings.challenge_count),
        theme_cache=ThemeCache(settings.challenge_theme),
    )
