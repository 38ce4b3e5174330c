"""Profile statistics and score labels."""
from rooty.api import Result, get_stats_overview


def get_accuracy_label(percent: float) -> str:
    if percent >= 80:
        return "EXCELLENT"
    elif percent >= 60:
        return "GOOD"
    elif percent >= 40:
        return "LEARNING"
    return "JUST STARTING"


def get_accuracy_color(percent: float) -> str:
    if percent >= 80:
        return "green"
    elif percent >= 60:
        return "yellow"
    elif percent >= 40:
        return "dark_orange"
    return "red"


def get_score_message(percentage: int) -> str:
    if percentage >= 80:
        return "Excellent work!"
    elif percentage >= 60:
        return "Good job! Keep practicing!"
    return "Keep learning! Review your mistakes."


def get_score_icon(percentage: int) -> str:
    if percentage >= 80:
        return "🌟"
    elif percentage >= 60:
        return "👍"
    return "📚"


def load_stats(client) -> Result:
    """Stats for the signed-in user, plus derived label and color."""
    result = get_stats_overview(client)
    if result.error:
        return result
    stats = result.data
    return Result(data={
        "stats": stats,
        "label": get_accuracy_label(stats.accuracy_percent),
        "color": get_accuracy_color(stats.accuracy_percent),
        "incorrect_attempts": stats.total_attempts - stats.correct_attempts,
    })
