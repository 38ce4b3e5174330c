"""Grading and presentation contract shared by root and word items."""
import random
from dataclasses import dataclass

from rooty.errors import AnswerLockedError
from rooty.models import ItemKind, RootItem, WordItem


def normalize(text: str) -> str:
    return text.lower().strip()


def grade_root_answer(answer: str, meaning: str) -> bool:
    """Lenient check: exact match, or either string contains the other."""
    a = normalize(answer)
    m = normalize(meaning)
    return a == m or a in m or m in a


def grade_word_answer(selected: str, correct_meaning: str) -> bool:
    return selected == correct_meaning


def grade(item, answer: str) -> bool:
    if item.kind is ItemKind.ROOT:
        return grade_root_answer(answer, item.meaning)
    if item.kind is ItemKind.WORD:
        return grade_word_answer(answer, item.correct_meaning)
    raise TypeError(f"unknown item kind: {item.kind!r}")


def shuffle_options(options, rng: random.Random | None = None) -> list:
    """Return a shuffled copy of ``options``; every permutation is equally likely."""
    shuffled = list(options)
    (rng or random).shuffle(shuffled)
    return shuffled


def prompt_text(item) -> str:
    if item.kind is ItemKind.ROOT:
        return "What does this root mean?"
    return f'What does "{item.english_word}" mean at its roots?'


def feedback_text(item, is_correct: bool) -> str:
    if item.kind is ItemKind.ROOT:
        lead = "Correct!" if is_correct else "Not quite."
        return f'{lead} The root {item.root_text} means "{item.meaning}".'
    lead = "Correct!" if is_correct else "Not quite."
    return f'{lead} "{item.english_word}" ({item.component_roots}) means "{item.correct_meaning}".'


@dataclass
class Feedback:
    is_correct: bool
    user_answer: str
    correct_answer: str
    message: str


class QuizCard:
    """One item as shown to the learner. Accepts exactly one answer."""

    def __init__(self, item: RootItem | WordItem, rng: random.Random | None = None):
        self.item = item
        self.rng = rng
        self.feedback: Feedback | None = None
        self._shuffled_for = None
        self._options: list = []

    @property
    def options(self) -> list:
        """Display order for word items, shuffled once per option set."""
        if self.item.kind is not ItemKind.WORD:
            return []
        key = (self.item.options, self.item.correct_meaning)
        if key != self._shuffled_for:
            self._options = shuffle_options(self.item.options, self.rng)
            self._shuffled_for = key
        return self._options

    @property
    def locked(self) -> bool:
        return self.feedback is not None

    def submit(self, answer: str) -> Feedback:
        if self.locked:
            raise AnswerLockedError(f"item {self.item.id} has already been answered")
        if self.item.kind is ItemKind.ROOT and not answer.strip():
            raise ValueError("answer is empty")
        is_correct = grade(self.item, answer)
        self.feedback = Feedback(
            is_correct=is_correct,
            user_answer=answer,
            correct_answer=self.item.answer,
            message=feedback_text(self.item, is_correct),
        )
        return self.feedback
