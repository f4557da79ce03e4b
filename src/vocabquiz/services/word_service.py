"""Service for managing words in the system."""
import dataclasses
import logging
from datetime import UTC, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from vocabquiz import monitoring
from vocabquiz.config import settings
from vocabquiz.models.quiz_models import Word
from vocabquiz.services.write_queue import WriteBehindQueue
from vocabquiz.timestamps import ensure_utc, resolve_now

logger = logging.getLogger(__name__)

EPOCH = datetime.min.replace(tzinfo=UTC)
UPDATABLE_FIELDS = {f.name for f in dataclasses.fields(Word)} - {"id", "created_at"}


class WordService:
    """In-memory word repository with optional write-behind persistence.

    The in-memory copy is authoritative: every mutation is applied here
    immediately and then queued for the durable store.
    """

    def __init__(self, queue: Optional[WriteBehindQueue] = None):
        """Initialize the service with an optional write-behind queue."""
        self.queue = queue
        self._words: Dict[str, Word] = {}

    def load(self, words: Iterable[Word]) -> None:
        """Replace the in-memory words, e.g. with the durable copy at startup."""
        self._words = {word.id: word for word in words}
        logger.info(f"Loaded {len(self._words)} words")

    def _persist(self, kind: str, payload: Any) -> None:
        if self.queue is not None:
            self.queue.enqueue(kind, payload)

    def get_word(self, word_id: str) -> Optional[Word]:
        """Get a word by its ID."""
        return self._words.get(word_id)

    def get_word_count(self) -> int:
        return len(self._words)

    def list_words(self) -> List[Word]:
        """All words, newest first."""
        return sorted(
            self._words.values(),
            key=lambda w: w.created_at or EPOCH,
            reverse=True,
        )

    def add_word(
        self,
        english: str,
        turkish: str,
        category: str = settings.quiz.default_category,
        folder: str = settings.quiz.default_folder,
        example: str = "",
        emoji: str = "",
        part_of_speech: str = "",
        now: Optional[datetime] = None,
    ) -> Word:
        """Create a new word, due for review immediately."""
        english = english.strip()
        turkish = turkish.strip()
        if not english or not turkish:
            raise ValueError("Both english and turkish are required")

        now = resolve_now(now)
        word = Word(
            english=english,
            turkish=turkish,
            category=category.strip() or settings.quiz.default_category,
            folder=folder.strip() or settings.quiz.default_folder,
            example=example.strip(),
            emoji=emoji.strip(),
            part_of_speech=part_of_speech.strip(),
            level=1,
            next_review=now,
            last_reviewed=None,
            created_at=now,
        )
        self._words[word.id] = word
        self._persist("upsert_word", dataclasses.replace(word))
        monitoring.words_added.inc()
        logger.debug(f"Added word {word.id}: {word.english}")
        return word

    def update_word(self, word_id: str, **kwargs) -> Optional[Word]:
        """Update a word's attributes. Unknown ids are ignored."""
        word = self.get_word(word_id)
        if not word:
            return None

        unknown = set(kwargs) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update word fields: {', '.join(sorted(unknown))}")

        for key, value in kwargs.items():
            if isinstance(value, datetime):
                value = ensure_utc(value)
            setattr(word, key, value)

        self._persist("upsert_word", dataclasses.replace(word))
        return word

    def delete_word(self, word_id: str) -> bool:
        """Delete a word."""
        if self._words.pop(word_id, None) is None:
            return False
        self._persist("delete_word", word_id)
        return True

    def delete_words(self, word_ids: Iterable[str]) -> int:
        """Delete several words. Returns how many existed."""
        return sum(1 for word_id in list(word_ids) if self.delete_word(word_id))

    def restore_word(self, word: Word) -> bool:
        """Put back a previously deleted word, keeping its id."""
        if word.id in self._words:
            return False
        self._words[word.id] = word
        self._persist("upsert_word", dataclasses.replace(word))
        return True

    def import_words(self, records: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> List[Word]:
        """Import words from backup records.

        Records missing ``english`` or ``turkish`` are skipped. Records
        carrying an id replace the existing word with that id.
        """
        now = resolve_now(now)
        imported = []
        skipped = 0
        for record in records:
            try:
                word = Word.from_dict(record, now=now)
            except (ValueError, TypeError, KeyError) as e:
                skipped += 1
                logger.debug(f"Skipping word record: {e}")
                continue
            self._words[word.id] = word
            self._persist("upsert_word", dataclasses.replace(word))
            imported.append(word)

        if skipped:
            logger.warning(f"Skipped {skipped} malformed word records during import")
        monitoring.words_imported.inc(len(imported))
        logger.info(f"Imported {len(imported)} words")
        return imported

    def get_words_for_review(self, now: Optional[datetime] = None, count: Optional[int] = None) -> List[Word]:
        """Get words that are due for review, most overdue first."""
        now = resolve_now(now)
        due = [word for word in self._words.values() if word.is_due(now)]
        due.sort(key=lambda w: (w.next_review is not None, ensure_utc(w.next_review) if w.next_review else now))
        return due[:count] if count is not None else due
