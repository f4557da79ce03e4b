"""Tests for quiz models and timestamp helpers."""
from datetime import UTC, datetime, timedelta, timezone

import pytest

from vocabquiz.config import settings
from vocabquiz.models.quiz_models import (
    AnswerResult,
    HistoryEntry,
    Question,
    QuestionType,
    QuizMode,
    QuizResults,
    Word,
    round_percentage,
)
from vocabquiz.timestamps import calendar_day, ensure_utc, format_timestamp, parse_timestamp


def test_format_timestamp_uses_millisecond_zulu_form():
    value = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=UTC)
    assert format_timestamp(value) == "2024-01-02T03:04:05.678Z"
    assert format_timestamp(None) is None


def test_parse_timestamp_accepts_zulu_and_offsets():
    assert parse_timestamp("2024-01-02T03:04:05.678Z") == datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)
    assert parse_timestamp("2024-01-02T05:04:05+02:00") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp("not a date")
    with pytest.raises(ValueError):
        parse_timestamp(12345)


def test_ensure_utc_and_calendar_day():
    naive = datetime(2024, 1, 2, 23, 30)
    assert ensure_utc(naive).tzinfo == UTC
    shifted = datetime(2024, 1, 3, 1, 30, tzinfo=timezone(timedelta(hours=3)))
    assert calendar_day(shifted) == datetime(2024, 1, 2).date()


@pytest.mark.parametrize("correct,total,expected", [
    (7, 10, 70),
    (1, 8, 13),
    (1, 3, 33),
    (2, 3, 67),
    (0, 5, 0),
    (5, 5, 100),
    (0, 0, 0),
])
def test_round_percentage(correct, total, expected):
    assert round_percentage(correct, total) == expected


def test_word_round_trip(now, make_word):
    word = make_word(
        category="Animals",
        folder="Week 1",
        example="The cat sleeps.",
        emoji="🐈",
        part_of_speech="noun",
        level=3,
        last_reviewed=now - timedelta(days=2),
    )
    data = word.to_dict()
    assert data["partOfSpeech"] == "noun"
    assert data["nextReview"] == "2024-01-10T12:00:00.000Z"

    restored = Word.from_dict(data)
    assert restored == word


def test_word_from_dict_fills_defaults(now):
    word = Word.from_dict({"english": " cat ", "turkish": "kedi"}, now=now)
    assert word.english == "cat"
    assert word.id
    assert word.level == 1
    assert word.category == settings.quiz.default_category
    assert word.folder == settings.quiz.default_folder
    assert word.next_review == now
    assert word.created_at == now
    assert word.last_reviewed is None


def test_word_from_dict_coerces_id_and_clamps_level():
    word = Word.from_dict({"id": 42, "english": "cat", "turkish": "kedi", "level": 99})
    assert word.id == "42"
    assert word.level == settings.quiz.max_level


@pytest.mark.parametrize("record", [
    {"english": "cat"},
    {"turkish": "kedi"},
    {"english": "  ", "turkish": "kedi"},
])
def test_word_from_dict_requires_both_sides(record):
    with pytest.raises(ValueError):
        Word.from_dict(record)


def test_word_without_schedule_is_due(now):
    assert Word(english="cat", turkish="kedi").is_due(now)
    assert not Word(english="cat", turkish="kedi", next_review=now + timedelta(seconds=1)).is_due(now)


def test_history_entry_round_trip(now, make_word):
    word = make_word()
    question = Question(
        id=f"q-{word.id}-0",
        type=QuestionType.MULTIPLE_CHOICE,
        question=word.english,
        correct_answer=word.turkish,
        word=word,
        options=[word.turkish, "a", "b", "c"],
    )
    wrong = AnswerResult(question, "a", False)
    entry = HistoryEntry(
        date=now,
        total=4,
        correct=3,
        incorrect=1,
        percentage=75,
        category="Animals",
        mode=QuizMode.MULTIPLE_CHOICE.value,
        wrong_answers=[wrong],
    )

    data = entry.to_dict()
    assert data["wrongAnswers"][0]["userAnswer"] == "a"
    assert data["wrongAnswers"][0]["question"]["correctAnswer"] == word.turkish
    assert HistoryEntry.from_dict(data) == entry


def test_history_entry_from_dict_derives_counts():
    entry = HistoryEntry.from_dict({"date": "2024-01-01T10:00:00.000Z", "total": 8, "correct": 1})
    assert entry.incorrect == 7
    assert entry.percentage == 13
    assert entry.category == "all"
    assert entry.mode == QuizMode.MIXED.value
    assert entry.wrong_answers == []


def test_history_entry_from_dict_requires_date():
    with pytest.raises(ValueError):
        HistoryEntry.from_dict({"total": 1, "correct": 1})


def test_history_entry_from_results_snapshots_wrong_answers(now, make_word):
    word = make_word(level=2)
    question = Question("q-1", QuestionType.FILL_IN, word.english, word.turkish, word)
    wrong = AnswerResult(question, "", False)
    results = QuizResults(1, 0, 1, 0, [wrong], [wrong], mode=QuizMode.FILL_IN)

    entry = HistoryEntry.from_results(results, now)
    word.level = 1

    assert entry.mode == "fill-in"
    assert entry.wrong_answers[0].question.word.level == 2


def test_naive_schedule_compares_as_utc(now):
    word = Word(english="cat", turkish="kedi", next_review=datetime(2024, 1, 10, 11, 0))
    assert word.is_due(now)
    assert not word.is_due(datetime(2024, 1, 10, 10, 0))


def test_numeric_backup_ids_are_exported_as_strings():
    word = Word.from_dict({"id": 1704880800000, "english": "cat", "turkish": "kedi"})
    entry = HistoryEntry.from_dict(
        {"id": 1704880800000.25, "date": "2024-01-10T10:00:00.000Z", "total": 1, "correct": 1}
    )

    assert word.to_dict()["id"] == "1704880800000"
    assert entry.to_dict()["id"] == "1704880800000.25"
