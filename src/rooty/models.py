"""Data classes for the vocabulary domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional


class ItemKind(str, Enum):
    ROOT = "root"
    WORD = "word"


@dataclass
class Theme:
    id: int
    name: str
    week_start: str
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Theme":
        return cls(
            id=int(row["id"]),
            name=row["name"],
            week_start=row.get("week_start") or "",
            description=row.get("description"),
        )


@dataclass(frozen=True)
class RootItem:
    """Open-response question: what does this root mean?"""
    kind: ClassVar[ItemKind] = ItemKind.ROOT

    id: int
    root_text: str
    origin_lang: str
    meaning: str
    examples: tuple = ()
    source_title: str = ""
    source_url: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "RootItem":
        if not row.get("meaning"):
            raise ValueError(f"root {row.get('id')} has no meaning")
        return cls(
            id=int(row["id"]),
            root_text=row["root_text"],
            origin_lang=row.get("origin_lang") or "",
            meaning=row["meaning"],
            examples=tuple(row.get("examples") or ()),
            source_title=row.get("source_title") or "",
            source_url=row.get("source_url") or "",
        )

    @property
    def answer(self) -> str:
        return self.meaning


@dataclass(frozen=True)
class WordItem:
    """Multiple-choice question about the roots inside an English word."""
    kind: ClassVar[ItemKind] = ItemKind.WORD

    id: int
    english_word: str
    component_roots: str
    correct_meaning: str
    options: tuple
    origin_lang: str = ""
    source_title: str = ""
    source_url: str = ""

    def __post_init__(self):
        if len(self.options) != 4:
            raise ValueError(f"word {self.id} needs exactly 4 options, got {len(self.options)}")
        if self.correct_meaning not in self.options:
            raise ValueError(f"word {self.id}: correct meaning is not one of the options")

    @classmethod
    def from_row(cls, row: dict) -> "WordItem":
        return cls(
            id=int(row["id"]),
            english_word=row["english_word"],
            component_roots=row.get("component_roots") or "",
            correct_meaning=row["correct_meaning"],
            options=tuple(row[f"option_{n}"] for n in range(1, 5)),
            origin_lang=row.get("origin_lang") or "",
            source_title=row.get("source_title") or "",
            source_url=row.get("source_url") or "",
        )

    @property
    def answer(self) -> str:
        return self.correct_meaning


@dataclass(frozen=True)
class ReviewItem(RootItem):
    """A root from the wrong-answer queue."""
    times_incorrect: int = 0
    queued_at: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "ReviewItem":
        # The review RPC reports the root under root_id.
        row = {**row, "id": row.get("root_id", row.get("id"))}
        base = RootItem.from_row(row)
        return cls(
            id=base.id,
            root_text=base.root_text,
            origin_lang=base.origin_lang,
            meaning=base.meaning,
            examples=base.examples,
            source_title=base.source_title,
            source_url=base.source_url,
            times_incorrect=int(row.get("times_incorrect") or 0),
            queued_at=row.get("queued_at") or "",
        )


@dataclass
class AttemptAck:
    success: bool
    attempt_id: Optional[int] = None
    message: str = ""


@dataclass
class StatsOverview:
    total_attempts: int = 0
    correct_attempts: int = 0
    accuracy_percent: float = 0.0
    roots_learned: int = 0
    current_streak: int = 0


@dataclass
class Profile:
    id: str
    role: str = "learner"
    display_name: Optional[str] = None


@dataclass
class User:
    id: str
    email: str = ""
    metadata: dict = field(default_factory=dict)
