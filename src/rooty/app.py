"""Interactive CLI application."""
import asyncio
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from rooty.api import get_themes
from rooty.config import load_settings
from rooty.context import AppContext, build_context
from rooty.dashboard import get_score_icon, load_stats
from rooty.errors import RootyError
from rooty.models import ItemKind
from rooty.navigation import Route, parse_session_query, require_user
from rooty.quiz import prompt_text
from rooty.review import ReviewSession
from rooty.seed import seed_roots
from rooty.session import QuizMode, QuizSession, SessionState

console = Console()
logger = logging.getLogger(__name__)


class SessionExitRequested(Exception):
    """Raised when the user types 'q' or 'menu' during a quiz."""


EXIT_WORDS = ("q", "menu")


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_choice_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]🌱 Rooty[/bold]\n[dim]Learn Latin and Greek word roots through weekly themed quizzes[/dim]",
        title="Welcome", border_style="green",
    ))


def show_menu(ctx: AppContext):
    who = ctx.auth.user.email if ctx.auth.user else "not signed in"
    console.print(f"\n[bold]Commands:[/bold] [dim]({who})[/dim]")
    commands = [
        ("login", "Sign in"),
        ("signup", "Create an account"),
        ("learn", "Pick a theme and start a quiz"),
        ("challenges", "Daily root challenges"),
        ("session", "Open a session link, e.g. session theme=1&challenge=2"),
        ("review", "Practice your mistakes"),
        ("profile", "Your statistics"),
        ("reset", "Reset daily challenge progress"),
        ("seed", "Load sample roots into the backend"),
        ("logout", "Sign out"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def render_card(session: QuizSession) -> None:
    item = session.current
    card = session.card
    header = f"Question {session.index + 1} of {session.total}"
    if item.kind is ItemKind.ROOT:
        body = f"[bold]{item.root_text}[/bold]\n[dim]Origin: {item.origin_lang}[/dim]"
        if item.examples:
            body += "\n\nExample words: " + ", ".join(item.examples)
        times = getattr(item, "times_incorrect", 0)
        if times:
            body += f"\n[dim]Answered incorrectly {times} time{'s' if times > 1 else ''}[/dim]"
    else:
        body = f"[bold]{item.english_word}[/bold]\n[dim]{item.component_roots} · Origin: {item.origin_lang}[/dim]\n\n{prompt_text(item)}"
        for n, option in enumerate(card.options, 1):
            body += f"\n  [cyan]{n})[/cyan] {option}"
    if item.source_title:
        body += f"\n\n[dim]Source: {item.source_title} {item.source_url}[/dim]"
    console.print(Panel(body, title=header, border_style="cyan"))


def ask_answer(session: QuizSession) -> str:
    item = session.current
    if item.kind is ItemKind.WORD:
        n = session_choice_prompt("Your answer", choices=["1", "2", "3", "4"])
        return session.card.options[n - 1]
    while True:
        answer = session_prompt(prompt_text(item))
        if answer.strip():
            return answer


def show_summary(session: QuizSession) -> None:
    s = session.summary
    console.print(Panel(
        f"{get_score_icon(s.percentage)}  [bold]{s.score} / {s.total}[/bold]  ({s.percentage}%)\n\n{s.message}",
        title="Session Complete!", border_style="green",
    ))


async def load_with_retry(ctx: AppContext, session: QuizSession) -> bool:
    """Load until a batch arrives or the user gives up. Returns True when ready."""
    while True:
        with console.status("Loading quiz session..."):
            state = await session.load()
        if state is not SessionState.ERROR:
            return state is SessionState.READY or state is SessionState.CAUGHT_UP
        console.print(f"[red]Error loading session:[/red] {session.error}")
        choice = Prompt.ask("Try again?", choices=["retry", "back"], default="retry")
        if choice != "retry":
            ctx.navigator.go(Route.LEARN)
            return False


async def run_quiz_session(ctx: AppContext, session: QuizSession) -> None:
    try:
        if not await load_with_retry(ctx, session):
            return
        if session.state is SessionState.CAUGHT_UP:
            console.print(Panel(session.empty_message, title="All Caught Up!", border_style="green"))
            return
        while session.state is SessionState.READY:
            render_card(session)
            answer = ask_answer(session)
            feedback = session.submit(answer)
            color = "green" if feedback.is_correct else "red"
            console.print(f"[{color}]{feedback.message}[/{color}]")
            if not feedback.is_correct:
                console.print(f"[dim]Your answer: {feedback.user_answer}[/dim]")
            console.print(f"[dim]Score: {session.score} / {session.answered}[/dim]\n")
            await session.wait_for_advance()

        if isinstance(session, ReviewSession):
            s = session.summary
            console.print(Panel(
                f"[bold green]{s.score} Mastered[/bold green]\nout of {s.total} reviewed"
                + ("\n[dim]Incorrect answers will remain in your review queue.[/dim]" if s.score < s.total else ""),
                title="Review Complete!", border_style="green",
            ))
        else:
            show_summary(session)
        if session.challenge_mode:
            console.print(f"[green]Challenge {session.challenge} complete! Returning home...[/green]")
            await session.settle()
        else:
            nxt = Prompt.ask("Next", choices=["retry", "review", "learn", "menu"], default="menu")
            if nxt == "retry":
                ctx.navigator.go(Route.SESSION, theme_id=session.theme_id, mode=session.mode)
            elif nxt == "review":
                ctx.navigator.go(Route.REVIEW)
            elif nxt == "learn":
                ctx.navigator.go(Route.LEARN)
        await session.flush_attempts()
    except SessionExitRequested:
        console.print("[dim]Leaving the quiz.[/dim]")
    finally:
        session.close()


def cmd_login(ctx: AppContext, **_):
    email = Prompt.ask("Email")
    password = Prompt.ask("Password", password=True)
    try:
        ctx.auth.sign_in(email, password)
    except RootyError as e:
        console.print(f"[red]{e}[/red]")
        return
    console.print(f"[green]Welcome back, {ctx.auth.profile.display_name if ctx.auth.profile else email}![/green]")


def cmd_signup(ctx: AppContext, **_):
    email = Prompt.ask("Email")
    password = Prompt.ask("Password", password=True)
    display_name = Prompt.ask("Display name", default=email.split("@")[0])
    try:
        ctx.auth.sign_up(email, password, display_name)
    except RootyError as e:
        console.print(f"[red]{e}[/red]")
        return
    if ctx.auth.user:
        console.print("[green]Account created. You're signed in.[/green]")
    else:
        console.print("[green]Account created. Check your email to confirm, then log in.[/green]")


def cmd_logout(ctx: AppContext, **_):
    ctx.auth.sign_out()
    console.print("[dim]Signed out.[/dim]")


def cmd_learn(ctx: AppContext, **_):
    result = get_themes(ctx.client)
    if result.error:
        console.print(f"[red]Error: {result.error}[/red]")
        return
    if not result.data:
        console.print("[yellow]No themes available yet. Run 'seed' to load sample data.[/yellow]")
        return
    table = Table(title="Learn Word Roots")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Theme")
    table.add_column("Week of")
    table.add_column("Description", style="dim")
    for theme in result.data:
        table.add_row(str(theme.id), theme.name, theme.week_start, theme.description or "No description available")
    console.print(table)
    choice = Prompt.ask("Theme ID (or 'all' for a random mix)", default="all")
    theme_id = None if choice.strip().lower() == "all" else int(choice)
    mode = Prompt.ask("Quiz type", choices=[m.value for m in QuizMode], default=QuizMode.ROOTS.value)
    cmd_session(ctx, theme_id=theme_id, mode=QuizMode(mode))


def cmd_session(ctx: AppContext, theme_id=None, challenge=None, mode=QuizMode.ROOTS, query: str = "", **_):
    if query:
        parsed = parse_session_query(query)
        theme_id, challenge = parsed["theme_id"], parsed["challenge"]
        if ctx.challenges.is_valid(challenge):
            mode = QuizMode.WORDS
    if not require_user(ctx.auth, ctx.navigator):
        return
    asyncio.run(run_quiz_session(ctx, QuizSession(ctx, theme_id=theme_id, challenge=challenge, mode=mode)))


def cmd_challenges(ctx: AppContext, **_):
    if not require_user(ctx.auth, ctx.navigator):
        return
    theme_id = ctx.theme_cache.get_theme_id(ctx.client)
    if theme_id is None:
        console.print(f"[red]The {ctx.settings.challenge_theme} theme isn't available right now.[/red]")
        return
    total = ctx.challenges.total
    completed = ctx.challenges.get_completed()
    console.print(f"\n[bold]🎄 Daily Root Challenges – {ctx.settings.challenge_theme}[/bold]")
    for n in range(1, total + 1):
        status = "[green]Completed[/green]" if n in completed else "[dim]Not started[/dim]"
        console.print(f"  Challenge {n} of {total}  {status}")
    if ctx.challenges.all_complete():
        console.print(f"\n[green]You've finished today's {total} challenges![/green]")
        return
    pick = Prompt.ask("Start challenge", choices=[str(n) for n in range(1, total + 1)] + ["back"], default="back")
    if pick == "back":
        return
    cmd_session(ctx, theme_id=theme_id, challenge=int(pick), mode=QuizMode.WORDS)


def cmd_review(ctx: AppContext, **_):
    if not require_user(ctx.auth, ctx.navigator):
        return
    asyncio.run(run_quiz_session(ctx, ReviewSession(ctx)))


def cmd_profile(ctx: AppContext, **_):
    if not require_user(ctx.auth, ctx.navigator):
        return
    profile = ctx.auth.profile
    console.print(Panel(
        f"[bold]{(profile and profile.display_name) or 'Your Profile'}[/bold]\n"
        f"[dim]Role: {(profile and profile.role) or 'learner'}[/dim]",
        border_style="blue",
    ))
    result = load_stats(ctx.client)
    if result.error:
        console.print(f"[red]Error loading stats: {result.error}[/red]")
        return
    stats, color = result.data["stats"], result.data["color"]
    table = Table(title="Progress Overview")
    table.add_column("Stat", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Accuracy", f"[{color}]{stats.accuracy_percent}% ({result.data['label']})[/{color}]")
    table.add_row("Roots Learned", str(stats.roots_learned))
    table.add_row("Current Streak", f"{stats.current_streak} 🔥")
    table.add_row("Correct Answers", f"{stats.correct_attempts}/{stats.total_attempts}")
    table.add_row("Incorrect Answers", str(result.data["incorrect_attempts"]))
    console.print(table)


def cmd_reset(ctx: AppContext, **_):
    ctx.challenges.reset()
    console.print("[dim]Daily challenge progress cleared.[/dim]")


def cmd_seed(ctx: AppContext, **_):
    count = seed_roots(ctx.settings)
    if count:
        console.print(f"[green]Loaded {count} sample roots.[/green]")
    else:
        console.print("[dim]Roots already loaded.[/dim]")


COMMANDS = {
    "login": cmd_login,
    "signup": cmd_signup,
    "logout": cmd_logout,
    "learn": cmd_learn,
    "session": cmd_session,
    "challenges": cmd_challenges,
    "review": cmd_review,
    "profile": cmd_profile,
    "reset": cmd_reset,
    "seed": cmd_seed,
}

ROUTE_COMMANDS = {
    Route.AUTH: cmd_login,
    Route.LEARN: cmd_learn,
    Route.SESSION: cmd_session,
    Route.REVIEW: cmd_review,
    Route.PROFILE: cmd_profile,
}


def follow_navigation(ctx: AppContext, max_redirects: int = 3) -> None:
    """Run the screen a command navigated to, until we are back home.

    Routes picked by the learner are always followed. Sign-in redirects are
    capped so a failing login cannot bounce forever.
    """
    redirects = 0
    while ctx.navigator.current is not Route.HOME:
        route, params = ctx.navigator.current, ctx.navigator.params
        ctx.navigator.go(Route.HOME)
        if route is Route.AUTH:
            redirects += 1
            if redirects > max_redirects:
                return
            console.print("[yellow]Please sign in first.[/yellow]")
        ROUTE_COMMANDS[route](ctx, **params)


def main():
    try:
        settings = load_settings()
    except RootyError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    configure_logging(settings.log_level)
    ctx = build_context(settings)

    show_welcome()

    while True:
        show_menu(ctx)
        line = Prompt.ask("\n[bold]>[/bold]", default="learn").strip()
        choice, _, arg = line.partition(" ")
        choice = choice.lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Happy learning![/dim]")
                break
            handler = COMMANDS.get(choice)
            if handler is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            if arg:
                handler(ctx, query=arg.strip())
            else:
                handler(ctx)
            follow_navigation(ctx)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
