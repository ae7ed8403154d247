"""Typed study-content records and the content-kind tagged union.

Responsibilities:
- Represent generated items (questions, flashcards, slides) with one
  natural-language field usable for similarity comparison.
- Represent finished content sets as a closed union dispatched on `ContentKind`.
- Convert items and content sets to and from JSON-compatible payloads.

Key types:
- `Question`, `Flashcard`, `Slide`: generated items.
- `QuestionSet`, `FlashcardSet`, `SlideDeck`, `Narration`: content payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Mapping, Protocol, Union

from ..errors import CollaboratorError, ErrorKind

DIFFICULTIES = ("basic", "intermediate", "advanced")
FLASHCARD_TYPES = frozenset({"question", "term", "case"})


class ContentKind(str, Enum):
    """Tag identifying one content kind."""

    QUIZ = "quiz"
    FLASHCARDS = "flashcards"
    SLIDES = "slides"
    NARRATION = "narration"

    @classmethod
    def parse(cls, value: str) -> ContentKind:
        """Parse a content kind tag, raising `ValueError` for unknown tags."""

        normalized = value.strip().lower()
        for kind in cls:
            if kind.value == normalized:
                return kind
        supported = ", ".join(kind.value for kind in cls)
        raise ValueError(f"Unsupported content kind `{value}`; supported: {supported}.")


def _contract_violation(detail: str) -> CollaboratorError:
    return CollaboratorError(detail, kind=ErrorKind.CONTRACT_VIOLATION)


def _required_text(payload: Mapping[str, Any], key: str, label: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise _contract_violation(f"{label} is missing non-empty `{key}`.")
    return value.strip()


def _optional_text(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _text_list(payload: Mapping[str, Any], key: str, label: str) -> tuple[str, ...]:
    value = payload.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise _contract_violation(f"{label} field `{key}` must be a list of strings.")
    return tuple(item.strip() for item in value)


class GeneratedItem(Protocol):
    """Structural type shared by all per-chunk generated items."""

    @property
    def similarity_text(self) -> str:
        """Return the natural-language field used for near-duplicate detection."""

    def with_difficulty(self, difficulty: str) -> GeneratedItem:
        """Return a copy carrying the given difficulty."""

    def to_payload(self) -> dict[str, Any]:
        """Serialize the item into a JSON-compatible mapping."""


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question with exactly four options.

    Attributes:
        question: Question text.
        options: Four answer options.
        correct_answer: 0-based index of the correct option.
        explanation: Optional answer explanation.
        difficulty: Difficulty level label.
    """

    question: str
    options: tuple[str, ...]
    correct_answer: int
    explanation: str | None = None
    difficulty: str | None = None

    @property
    def similarity_text(self) -> str:
        return self.question

    def with_difficulty(self, difficulty: str) -> Question:
        return replace(self, difficulty=difficulty)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }
        if self.explanation is not None:
            payload["explanation"] = self.explanation
        if self.difficulty is not None:
            payload["difficulty"] = self.difficulty
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Question:
        """Validate and build a question from collaborator output."""

        question = _required_text(payload, "question", "Question")
        options = _text_list(payload, "options", "Question")
        if len(options) != 4:
            raise _contract_violation("Question must have exactly 4 options.")
        correct_answer = payload.get("correctAnswer")
        if (
            isinstance(correct_answer, bool)
            or not isinstance(correct_answer, int)
            or not 0 <= correct_answer <= 3
        ):
            raise _contract_violation("Question `correctAnswer` must be an integer in 0..3.")
        return cls(
            question=question,
            options=options,
            correct_answer=correct_answer,
            explanation=_optional_text(payload, "explanation"),
            difficulty=_optional_text(payload, "difficulty"),
        )


@dataclass(frozen=True, slots=True)
class Flashcard:
    """Two-sided study flashcard."""

    front: str
    back: str
    card_type: str = "question"
    difficulty: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def similarity_text(self) -> str:
        return self.front

    def with_difficulty(self, difficulty: str) -> Flashcard:
        return replace(self, difficulty=difficulty)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "front": self.front,
            "back": self.back,
            "type": self.card_type,
            "tags": list(self.tags),
        }
        if self.difficulty is not None:
            payload["difficulty"] = self.difficulty
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Flashcard:
        """Validate and build a flashcard from collaborator output."""

        card_type = _optional_text(payload, "type") or "question"
        if card_type not in FLASHCARD_TYPES:
            card_type = "question"
        tags = payload.get("tags")
        return cls(
            front=_required_text(payload, "front", "Flashcard"),
            back=_required_text(payload, "back", "Flashcard"),
            card_type=card_type,
            difficulty=_optional_text(payload, "difficulty"),
            tags=_text_list(payload, "tags", "Flashcard") if tags is not None else tuple(),
        )


@dataclass(frozen=True, slots=True)
class Slide:
    """One presentation slide with a title and bullet points."""

    title: str
    bullets: tuple[str, ...]
    footer: str | None = None
    difficulty: str | None = None

    @property
    def similarity_text(self) -> str:
        return self.title

    def with_difficulty(self, difficulty: str) -> Slide:
        return replace(self, difficulty=difficulty)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": self.title, "bullets": list(self.bullets)}
        if self.footer is not None:
            payload["footer"] = self.footer
        if self.difficulty is not None:
            payload["difficulty"] = self.difficulty
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Slide:
        """Validate and build a slide from collaborator output."""

        bullets = _text_list(payload, "bullets", "Slide")
        if not bullets:
            raise _contract_violation("Slide must have at least one bullet.")
        return cls(
            title=_required_text(payload, "title", "Slide"),
            bullets=bullets,
            footer=_optional_text(payload, "footer"),
            difficulty=_optional_text(payload, "difficulty"),
        )


@dataclass(frozen=True, slots=True)
class QuestionSet:
    """Quiz payload."""

    kind: ClassVar[ContentKind] = ContentKind.QUIZ

    questions: tuple[Question, ...]
    difficulty: str

    @property
    def items(self) -> tuple[Question, ...]:
        return self.questions


@dataclass(frozen=True, slots=True)
class FlashcardSet:
    """Flashcard deck payload."""

    kind: ClassVar[ContentKind] = ContentKind.FLASHCARDS

    cards: tuple[Flashcard, ...]
    difficulty: str

    @property
    def items(self) -> tuple[Flashcard, ...]:
        return self.cards


@dataclass(frozen=True, slots=True)
class SlideDeck:
    """Slide deck payload."""

    kind: ClassVar[ContentKind] = ContentKind.SLIDES

    slides: tuple[Slide, ...]
    difficulty: str

    @property
    def items(self) -> tuple[Slide, ...]:
        return self.slides


@dataclass(frozen=True, slots=True)
class Narration:
    """Narrated summary payload.

    Attributes:
        script: Narration script text.
        audio_reference: Opaque reference returned by the artifact store, or empty.
        duration_seconds: Estimated spoken duration.
        voice: Speech voice identifier.
        difficulty: Difficulty level label.
    """

    kind: ClassVar[ContentKind] = ContentKind.NARRATION

    script: str
    audio_reference: str
    duration_seconds: int
    voice: str
    difficulty: str


GeneratedContent = Union[QuestionSet, FlashcardSet, SlideDeck, Narration]

ITEM_TYPES: dict[ContentKind, type] = {
    ContentKind.QUIZ: Question,
    ContentKind.FLASHCARDS: Flashcard,
    ContentKind.SLIDES: Slide,
}


def parse_item(kind: ContentKind, payload: Any) -> GeneratedItem:
    """Parse one collaborator payload into the item type for `kind`."""

    item_type = ITEM_TYPES.get(kind)
    if item_type is None:
        raise ValueError(f"Content kind `{kind.value}` has no per-item payload.")
    if not isinstance(payload, Mapping):
        raise _contract_violation(f"{item_type.__name__} payload must be an object.")
    return item_type.from_payload(payload)


def build_item_set(
    kind: ContentKind, items: list[GeneratedItem], difficulty: str
) -> QuestionSet | FlashcardSet | SlideDeck:
    """Wrap an ordered item list into the content set for `kind`."""

    if kind is ContentKind.QUIZ:
        return QuestionSet(questions=tuple(items), difficulty=difficulty)
    if kind is ContentKind.FLASHCARDS:
        return FlashcardSet(cards=tuple(items), difficulty=difficulty)
    if kind is ContentKind.SLIDES:
        return SlideDeck(slides=tuple(items), difficulty=difficulty)
    raise ValueError(f"Content kind `{kind.value}` is not an item set.")


def content_to_payload(content: GeneratedContent) -> dict[str, Any]:
    """Serialize a content payload into a JSON-compatible mapping."""

    if isinstance(content, Narration):
        return {
            "script": content.script,
            "audioReference": content.audio_reference,
            "duration": content.duration_seconds,
            "voiceUsed": content.voice,
            "difficulty": content.difficulty,
        }
    key = {
        ContentKind.QUIZ: "questions",
        ContentKind.FLASHCARDS: "flashcards",
        ContentKind.SLIDES: "slides",
    }[content.kind]
    return {
        key: [item.to_payload() for item in content.items],
        "difficulty": content.difficulty,
        "count": len(content.items),
    }


def content_from_payload(kind: ContentKind, payload: Mapping[str, Any]) -> GeneratedContent:
    """Rebuild a content payload from its stored mapping, dispatched on `kind`."""

    difficulty = str(payload.get("difficulty", ""))
    if kind is ContentKind.NARRATION:
        return Narration(
            script=str(payload.get("script", "")),
            audio_reference=str(payload.get("audioReference", "")),
            duration_seconds=int(payload.get("duration", 0)),
            voice=str(payload.get("voiceUsed", "")),
            difficulty=difficulty,
        )
    key = {
        ContentKind.QUIZ: "questions",
        ContentKind.FLASHCARDS: "flashcards",
        ContentKind.SLIDES: "slides",
    }.get(kind)
    if key is None:
        raise ValueError(f"Unsupported content kind `{kind}`.")
    raw_items = payload.get(key, [])
    if not isinstance(raw_items, list):
        raise ValueError(f"Stored `{kind.value}` payload field `{key}` must be a list.")
    items = [parse_item(kind, raw_item) for raw_item in raw_items]
    return build_item_set(kind, items, difficulty)
