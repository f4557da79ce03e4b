"""Tests for word service."""
from datetime import timedelta

import pytest
from faker import Faker

from vocabquiz.config import settings
from vocabquiz.services.word_service import WordService
from vocabquiz.services.write_queue import WriteBehindQueue

fake = Faker()


@pytest.fixture
def queue(mocker):
    """Create a mock write-behind queue."""
    return mocker.Mock(spec=WriteBehindQueue)


@pytest.fixture
def word_service(queue) -> WordService:
    """Create a word service instance."""
    return WordService(queue)


def queued(queue, kind):
    """Payloads enqueued with the given operation kind."""
    return [c.args[1] for c in queue.enqueue.call_args_list if c.args[0] == kind]


def test_add_word(word_service, queue, now):
    """Test adding a new word."""
    english = fake.word()
    turkish = fake.word()
    word = word_service.add_word(f" {english} ", turkish, category="Food", example=" An example. ", now=now)

    assert word.english == english
    assert word.turkish == turkish
    assert word.category == "Food"
    assert word.folder == settings.quiz.default_folder
    assert word.example == "An example."
    assert word.level == 1
    assert word.next_review == now
    assert word.created_at == now
    assert word.last_reviewed is None
    assert word_service.get_word(word.id) is word
    assert word_service.get_word_count() == 1

    payload = queued(queue, "upsert_word")[0]
    assert payload == word
    assert payload is not word


@pytest.mark.parametrize("english,turkish", [("", "kedi"), ("cat", "   ")])
def test_add_word_requires_both_sides(word_service, queue, english, turkish):
    with pytest.raises(ValueError):
        word_service.add_word(english, turkish)
    queue.enqueue.assert_not_called()


def test_blank_category_falls_back_to_default(word_service, now):
    word = word_service.add_word("cat", "kedi", category=" ", folder="", now=now)
    assert word.category == settings.quiz.default_category
    assert word.folder == settings.quiz.default_folder


def test_list_words_newest_first(word_service, now):
    old = word_service.add_word("old", "eski", now=now - timedelta(days=2))
    new = word_service.add_word("new", "yeni", now=now)
    middle = word_service.add_word("middle", "orta", now=now - timedelta(days=1))

    assert word_service.list_words() == [new, middle, old]


def test_update_word(word_service, queue, now):
    word = word_service.add_word("cat", "kedi", now=now)

    updated = word_service.update_word(word.id, turkish="pisi", level=3)

    assert updated.turkish == "pisi"
    assert updated.level == 3
    assert queued(queue, "upsert_word")[-1].turkish == "pisi"


def test_update_word_rejects_protected_fields(word_service, now):
    word = word_service.add_word("cat", "kedi", now=now)
    with pytest.raises(ValueError, match="id"):
        word_service.update_word(word.id, id="other")
    with pytest.raises(ValueError, match="created_at"):
        word_service.update_word(word.id, created_at=now)


def test_update_unknown_word(word_service):
    assert word_service.update_word("missing", level=2) is None


def test_delete_and_restore_word(word_service, queue, now):
    word = word_service.add_word("cat", "kedi", now=now)

    assert word_service.delete_word(word.id)
    assert word_service.get_word(word.id) is None
    assert not word_service.delete_word(word.id)
    assert queued(queue, "delete_word") == [word.id]

    assert word_service.restore_word(word)
    assert word_service.get_word(word.id) is word
    assert not word_service.restore_word(word)


def test_delete_words(word_service, now):
    ids = [word_service.add_word(fake.unique.word(), fake.unique.word(), now=now).id for _ in range(3)]
    assert word_service.delete_words(ids[:2] + ["missing"]) == 2
    assert [w.id for w in word_service.list_words()] == [ids[2]]


def test_import_words(word_service, queue, now):
    records = [
        {"english": "cat", "turkish": "kedi", "level": 3, "nextReview": "2024-01-01T00:00:00.000Z"},
        {"id": 7, "english": "dog", "turkish": "köpek", "category": "Animals"},
        {"english": "missing translation"},
        {"english": "bad date", "turkish": "x", "createdAt": "yesterday"},
    ]

    imported = word_service.import_words(records, now=now)

    assert [w.english for w in imported] == ["cat", "dog"]
    assert imported[0].level == 3
    assert imported[1].id == "7"
    assert imported[1].next_review == now
    assert word_service.get_word_count() == 2
    assert len(queued(queue, "upsert_word")) == 2


def test_import_replaces_word_with_same_id(word_service, now):
    word_service.import_words([{"id": "w1", "english": "cat", "turkish": "kedi"}], now=now)
    word_service.import_words([{"id": "w1", "english": "cat", "turkish": "pisi"}], now=now)
    assert word_service.get_word_count() == 1
    assert word_service.get_word("w1").turkish == "pisi"


def test_get_words_for_review(word_service, now):
    later = word_service.add_word("later", "sonra", now=now)
    word_service.update_word(later.id, next_review=now + timedelta(days=1))
    overdue = word_service.add_word("overdue", "gecikmiş", now=now)
    word_service.update_word(overdue.id, next_review=now - timedelta(days=3))
    due = word_service.add_word("due", "vadeli", now=now)
    unscheduled = word_service.add_word("new", "yeni", now=now)
    word_service.update_word(unscheduled.id, next_review=None)

    assert word_service.get_words_for_review(now) == [unscheduled, overdue, due]
    assert word_service.get_words_for_review(now, count=1) == [unscheduled]


def test_works_without_queue(now):
    service = WordService()
    word = service.add_word("cat", "kedi", now=now)
    assert service.delete_word(word.id)


def test_load_replaces_words(word_service, make_word):
    words = [make_word(), make_word()]
    word_service.load(words)
    assert word_service.get_word_count() == 2
    word_service.load([])
    assert word_service.get_word_count() == 0


def test_naive_times_are_stored_as_utc(word_service, now):
    naive_now = now.replace(tzinfo=None)
    word = word_service.add_word("cat", "kedi", now=naive_now)
    word_service.update_word(word.id, next_review=naive_now - timedelta(days=1))

    assert word.created_at == now
    assert word.next_review == now - timedelta(days=1)
    assert word_service.get_words_for_review(naive_now) == [word]
