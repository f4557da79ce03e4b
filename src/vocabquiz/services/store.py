"""Durable SQL store for words and quiz history."""
import logging
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from vocabquiz.models.models import StoredHistoryEntry, StoredWord
from vocabquiz.models.quiz_models import AnswerResult, HistoryEntry, Word
from vocabquiz.timestamps import ensure_utc

logger = logging.getLogger(__name__)


def _utc_or_none(value):
    return ensure_utc(value) if value is not None else None


class SQLStore:
    """SQLAlchemy-backed store that the write-behind queue writes into."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db
        self._handlers: Dict[str, Callable[[Any], None]] = {
            "upsert_word": self._upsert_word,
            "delete_word": self._delete_word,
            "upsert_history": self._upsert_history,
            "delete_history": self._delete_history,
            "clear_history": self._clear_history,
        }

    def load_words(self) -> List[Word]:
        """Load all stored words."""
        return [self._row_to_word(row) for row in self.db.query(StoredWord).all()]

    def load_history(self) -> List[HistoryEntry]:
        """Load all stored history entries, newest first."""
        rows = self.db.query(StoredHistoryEntry).order_by(StoredHistoryEntry.date.desc()).all()
        return [self._row_to_history(row) for row in rows]

    def apply(self, operation) -> None:
        """Stage one write operation in the current transaction."""
        handler = self._handlers.get(operation.kind)
        if handler is None:
            raise ValueError(f"Unknown write operation: {operation.kind}")
        handler(operation.payload)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def _upsert_word(self, word: Word) -> None:
        self.db.merge(StoredWord(
            id=word.id,
            english=word.english,
            turkish=word.turkish,
            category=word.category,
            folder=word.folder,
            part_of_speech=word.part_of_speech,
            example=word.example,
            emoji=word.emoji,
            level=word.level,
            next_review=word.next_review,
            last_reviewed=word.last_reviewed,
            created_at=word.created_at,
        ))

    def _delete_word(self, word_id: str) -> None:
        row = self.db.get(StoredWord, word_id)
        if row is not None:
            self.db.delete(row)

    def _upsert_history(self, entry: HistoryEntry) -> None:
        self.db.merge(StoredHistoryEntry(
            id=entry.id,
            date=entry.date,
            total=entry.total,
            correct=entry.correct,
            incorrect=entry.incorrect,
            percentage=entry.percentage,
            category=entry.category,
            folder=entry.folder,
            mode=entry.mode,
            wrong_answers=[answer.to_dict() for answer in entry.wrong_answers],
        ))

    def _delete_history(self, entry_id: str) -> None:
        row = self.db.get(StoredHistoryEntry, entry_id)
        if row is not None:
            self.db.delete(row)

    def _clear_history(self, _payload: Any = None) -> None:
        for row in self.db.query(StoredHistoryEntry).all():
            self.db.delete(row)

    @staticmethod
    def _row_to_word(row: StoredWord) -> Word:
        return Word(
            id=row.id,
            english=row.english,
            turkish=row.turkish,
            category=row.category,
            folder=row.folder,
            part_of_speech=row.part_of_speech or "",
            example=row.example or "",
            emoji=row.emoji or "",
            level=row.level,
            next_review=_utc_or_none(row.next_review),
            last_reviewed=_utc_or_none(row.last_reviewed),
            created_at=_utc_or_none(row.created_at),
        )

    @staticmethod
    def _row_to_history(row: StoredHistoryEntry) -> HistoryEntry:
        return HistoryEntry(
            id=row.id,
            date=ensure_utc(row.date),
            total=row.total,
            correct=row.correct,
            incorrect=row.incorrect,
            percentage=row.percentage,
            category=row.category,
            folder=row.folder,
            mode=row.mode,
            wrong_answers=[AnswerResult.from_dict(item) for item in row.wrong_answers or []],
        )
