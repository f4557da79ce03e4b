"""Learning statistics for dashboards and profiles."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from vocabquiz.config import settings
from vocabquiz.models.quiz_models import HistoryEntry, StreakStatus, Word
from vocabquiz.services.history_service import HistoryService
from vocabquiz.services.word_service import WordService
from vocabquiz.timestamps import resolve_now


@dataclass
class LearningStats:
    """Snapshot of a learner's progress."""
    total_words: int
    mastered_words: int
    due_words: int
    total_quizzes: int
    average_score: int
    best_score: int
    streak: StreakStatus
    last_quiz: Optional[HistoryEntry] = None
    recent_words: List[Word] = field(default_factory=list)


class StatsService:
    """Service for computing learning statistics."""

    RECENT_WORDS = 5

    def __init__(self, word_service: WordService, history_service: HistoryService):
        """Initialize the service with its repositories."""
        self.word_service = word_service
        self.history_service = history_service

    def get_stats(self, now: Optional[datetime] = None) -> LearningStats:
        now = resolve_now(now)
        words = self.word_service.list_words()
        history = self.history_service.list_history()

        percentages = [entry.percentage for entry in history]
        average = (2 * sum(percentages) + len(percentages)) // (2 * len(percentages)) if percentages else 0

        return LearningStats(
            total_words=len(words),
            mastered_words=sum(1 for w in words if w.level == settings.quiz.max_level),
            due_words=sum(1 for w in words if w.is_due(now)),
            total_quizzes=len(history),
            average_score=average,
            best_score=max(percentages, default=0),
            streak=self.history_service.get_streak_status(now),
            last_quiz=history[0] if history else None,
            recent_words=words[:self.RECENT_WORDS],
        )
