"""Models for words, quiz questions, results and history entries."""
import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from vocabquiz.config import settings
from vocabquiz.timestamps import ensure_utc, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


def round_percentage(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half up."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


class QuestionType(Enum):
    """Shapes a quiz question can take."""
    MULTIPLE_CHOICE = "multiple-choice"  # pick the translation among options
    FILL_IN = "fill-in"  # type the translation
    LISTENING = "listening"  # same as fill-in, prompt is spoken by the UI
    REVERSE = "reverse"  # translation shown, type the English word


class QuizMode(Enum):
    """Quiz modes selectable when starting a quiz."""
    MIXED = "mixed"
    MULTIPLE_CHOICE = "multiple-choice"
    FILL_IN = "fill-in"
    LISTENING = "listening"
    REVERSE = "reverse"


@dataclass
class Word:
    """A vocabulary entry with its mastery state."""
    english: str
    turkish: str
    id: str = field(default_factory=new_id)
    category: str = settings.quiz.default_category
    folder: str = settings.quiz.default_folder
    part_of_speech: str = ""
    example: str = ""
    emoji: str = ""
    level: int = 1
    next_review: Optional[datetime] = None
    last_reviewed: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_due(self, now: datetime) -> bool:
        """A word with no schedule is always due."""
        return self.next_review is None or ensure_utc(self.next_review) <= ensure_utc(now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "english": self.english,
            "turkish": self.turkish,
            "category": self.category,
            "folder": self.folder,
            "partOfSpeech": self.part_of_speech,
            "example": self.example,
            "emoji": self.emoji,
            "level": self.level,
            "nextReview": format_timestamp(self.next_review),
            "lastReviewed": format_timestamp(self.last_reviewed),
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], now: Optional[datetime] = None) -> "Word":
        """Build a word from a backup record, filling defaults.

        Raises ValueError when ``english`` or ``turkish`` is missing.
        """
        english = str(data.get("english") or "").strip()
        turkish = str(data.get("turkish") or "").strip()
        if not english or not turkish:
            raise ValueError("Word requires both 'english' and 'turkish'")

        level = int(data.get("level") or 1)
        level = max(1, min(level, settings.quiz.max_level))

        return cls(
            id=str(data["id"]) if data.get("id") else new_id(),
            english=english,
            turkish=turkish,
            category=data.get("category") or settings.quiz.default_category,
            folder=data.get("folder") or settings.quiz.default_folder,
            part_of_speech=data.get("partOfSpeech") or "",
            example=data.get("example") or "",
            emoji=data.get("emoji") or "",
            level=level,
            next_review=parse_timestamp(data.get("nextReview")) or now,
            last_reviewed=parse_timestamp(data.get("lastReviewed")),
            created_at=parse_timestamp(data.get("createdAt")) or now,
        )


@dataclass
class Question:
    """A generated quiz question. Not persisted outside history."""
    id: str
    type: QuestionType
    question: str
    correct_answer: str
    word: Word
    options: Optional[List[str]] = None  # multiple-choice only

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type.value,
            "question": self.question,
            "correctAnswer": self.correct_answer,
            "word": self.word.to_dict(),
        }
        if self.options is not None:
            data["options"] = list(self.options)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Question":
        options = data.get("options")
        return cls(
            id=str(data["id"]),
            type=QuestionType(data["type"]),
            question=data["question"],
            correct_answer=data["correctAnswer"],
            word=Word.from_dict(data["word"]),
            options=list(options) if options is not None else None,
        )


@dataclass
class AnswerResult:
    """A question paired with the submitted answer and its grading."""
    question: Question
    user_answer: str
    is_correct: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question.to_dict(),
            "userAnswer": self.user_answer,
            "isCorrect": self.is_correct,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnswerResult":
        return cls(
            question=Question.from_dict(data["question"]),
            user_answer=data.get("userAnswer") or "",
            is_correct=bool(data.get("isCorrect", False)),
        )


@dataclass
class QuizResults:
    """Aggregated outcome of a quiz session."""
    total: int
    correct: int
    incorrect: int
    percentage: int
    results: List[AnswerResult]
    wrong_answers: List[AnswerResult]
    category: str = "all"
    folder: str = "all"
    mode: QuizMode = QuizMode.MIXED
    is_review: bool = False


@dataclass
class HistoryEntry:
    """Persisted summary of one completed, non-review quiz."""
    date: datetime
    total: int
    correct: int
    incorrect: int
    percentage: int
    id: str = field(default_factory=new_id)
    category: str = "all"
    folder: str = "all"
    mode: str = QuizMode.MIXED.value
    wrong_answers: List[AnswerResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: QuizResults, when: datetime) -> "HistoryEntry":
        return cls(
            date=when,
            total=results.total,
            correct=results.correct,
            incorrect=results.incorrect,
            percentage=results.percentage,
            category=results.category,
            folder=results.folder,
            mode=results.mode.value,
            wrong_answers=copy.deepcopy(results.wrong_answers),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": format_timestamp(self.date),
            "total": self.total,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "percentage": self.percentage,
            "category": self.category,
            "folder": self.folder,
            "mode": self.mode,
            "wrongAnswers": [answer.to_dict() for answer in self.wrong_answers],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryEntry":
        """Build an entry from a backup record.

        ``date``, ``total`` and ``correct`` are required; ``incorrect`` and
        ``percentage`` are derived when absent.
        """
        when = parse_timestamp(data.get("date"))
        if when is None:
            raise ValueError("History entry requires 'date'")
        total = int(data["total"])
        correct = int(data["correct"])
        incorrect = data.get("incorrect")
        percentage = data.get("percentage")

        return cls(
            id=str(data["id"]) if data.get("id") else new_id(),
            date=when,
            total=total,
            correct=correct,
            incorrect=int(incorrect) if incorrect is not None else total - correct,
            percentage=int(percentage) if percentage is not None else round_percentage(correct, total),
            category=data.get("category") or "all",
            folder=data.get("folder") or "all",
            mode=data.get("mode") or QuizMode.MIXED.value,
            wrong_answers=[AnswerResult.from_dict(item) for item in data.get("wrongAnswers") or []],
        )


@dataclass
class StreakStatus:
    """Daily streak and one-day recovery eligibility."""
    streak: int
    can_recover: bool
    potential_streak: int = 0
    last_quiz_day: Optional[date] = None
