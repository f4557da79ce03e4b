"""Learning service: mastery grading and quiz completion."""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from vocabquiz import monitoring
from vocabquiz.config import settings
from vocabquiz.models.quiz_models import HistoryEntry, QuizResults, Word
from vocabquiz.services.history_service import HistoryService
from vocabquiz.services.word_service import WordService
from vocabquiz.timestamps import ensure_utc, resolve_now

logger = logging.getLogger(__name__)


def review_interval(level: int) -> timedelta:
    """Days until the next review for a mastery level: 2^(level - 1)."""
    return timedelta(days=2 ** (level - 1))


def grade_word(
    word: Word,
    is_correct: bool,
    now: datetime,
    max_level: int = settings.quiz.max_level,
) -> Dict[str, Any]:
    """Compute the mastery fields of a word after one graded answer.

    A correct answer raises the level by one (capped at ``max_level``) and
    schedules the next review 2^(level - 1) days ahead. An incorrect answer
    resets the level to 1 and leaves the word due immediately.
    """
    now = ensure_utc(now)
    if is_correct:
        level = min((word.level or 1) + 1, max_level)
        next_review = now + review_interval(level)
    else:
        level = 1
        next_review = now

    return {
        "level": level,
        "next_review": next_review,
        "last_reviewed": now,
    }


class LearningService:
    """Applies finished quizzes to word mastery and quiz history."""

    def __init__(self, word_service: WordService, history_service: HistoryService):
        """Initialize the service with its repositories."""
        self.word_service = word_service
        self.history_service = history_service

    def update_word_stats(self, word_id: str, is_correct: bool, now: Optional[datetime] = None) -> Optional[Word]:
        """Grade a single word. Unknown word ids are ignored."""
        word = self.word_service.get_word(word_id)
        if not word:
            logger.debug(f"Skipping grading for unknown word {word_id}")
            return None

        updates = grade_word(word, is_correct, resolve_now(now))
        logger.debug(f"Grading word {word_id}: correct={is_correct}, level {word.level} -> {updates['level']}")
        monitoring.answers_graded.labels(result="correct" if is_correct else "incorrect").inc()
        return self.word_service.update_word(word_id, **updates)

    def complete_quiz(
        self,
        results: QuizResults,
        recovering: bool = False,
        now: Optional[datetime] = None,
    ) -> Optional[HistoryEntry]:
        """Record a finished quiz.

        Review quizzes change nothing and return None. Otherwise every
        answered word is graded and a history entry is appended; when
        ``recovering`` the entry is dated one day back so yesterday's gap
        in the streak is filled.
        """
        monitoring.quizzes_completed.labels(
            mode=results.mode.value, review=str(results.is_review).lower()
        ).inc()

        if results.is_review:
            logger.info("Review quiz completed, mastery and history left unchanged")
            return None

        now = resolve_now(now)
        entry_date = now - timedelta(days=1) if recovering else now
        entry = self.history_service.add_history_entry(results, entry_date)

        for result in results.results:
            self.update_word_stats(result.question.word.id, result.is_correct, now)
        logger.info(
            f"Quiz completed: {results.correct}/{results.total} ({results.percentage}%)"
            + (" recorded for yesterday to recover streak" if recovering else "")
        )
        return entry
