"""Tests for stats service."""
from datetime import timedelta

import pytest

from vocabquiz.config import settings
from vocabquiz.models.quiz_models import QuizResults
from vocabquiz.services.history_service import HistoryService
from vocabquiz.services.stats_service import StatsService
from vocabquiz.services.word_service import WordService


@pytest.fixture
def word_service() -> WordService:
    return WordService()


@pytest.fixture
def history_service() -> HistoryService:
    return HistoryService()


@pytest.fixture
def stats_service(word_service, history_service) -> StatsService:
    """Create a stats service instance."""
    return StatsService(word_service, history_service)


def results(correct: int, total: int, percentage: int) -> QuizResults:
    return QuizResults(total, correct, total - correct, percentage, [], [])


def test_empty_stats(stats_service, now):
    stats = stats_service.get_stats(now)
    assert stats.total_words == 0
    assert stats.total_quizzes == 0
    assert stats.average_score == 0
    assert stats.best_score == 0
    assert stats.last_quiz is None
    assert stats.streak.streak == 0
    assert stats.recent_words == []


def test_stats(stats_service, word_service, history_service, now):
    words = [word_service.add_word(f"word{i}", f"kelime{i}", now=now - timedelta(hours=i)) for i in range(7)]
    word_service.update_word(words[0].id, level=settings.quiz.max_level, next_review=now + timedelta(days=16))
    word_service.update_word(words[1].id, level=3, next_review=now + timedelta(days=4))

    history_service.add_history_entry(results(7, 10, 70), now - timedelta(days=1))
    history_service.add_history_entry(results(1, 2, 50), now - timedelta(days=2))
    latest = history_service.add_history_entry(results(3, 4, 75), now)

    stats = stats_service.get_stats(now)

    assert stats.total_words == 7
    assert stats.mastered_words == 1
    assert stats.due_words == 5
    assert stats.total_quizzes == 3
    # (70 + 50 + 75) / 3 = 65.0
    assert stats.average_score == 65
    assert stats.best_score == 75
    assert stats.last_quiz is latest
    assert stats.streak.streak == 3
    assert stats.recent_words == words[:StatsService.RECENT_WORDS]


def test_average_score_rounds_half_up(stats_service, history_service, now):
    history_service.add_history_entry(results(1, 2, 50), now)
    history_service.add_history_entry(results(1, 1, 100), now)
    history_service.add_history_entry(results(0, 1, 0), now)
    history_service.add_history_entry(results(1, 1, 100), now - timedelta(days=1))

    assert stats_service.get_stats(now).average_score == 63
