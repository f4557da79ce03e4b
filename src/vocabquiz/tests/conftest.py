"""Test configuration."""
import os
import random
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Generator

import pytest
from dotenv import load_dotenv
from faker import Faker
from sqlalchemy.orm import Session, sessionmaker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from vocabquiz.models.base import init_db, make_engine
from vocabquiz.models.quiz_models import Word

fake = Faker()


@pytest.fixture(autouse=True)
def reset_unique_words():
    """Allow every test to draw from the full unique word pool."""
    yield
    fake.unique.clear()


@pytest.fixture
def now() -> datetime:
    """A fixed point in time."""
    return datetime(2024, 1, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def make_word(now: datetime) -> Callable[..., Word]:
    """Factory for words with unique English/Turkish values."""
    def _make(**overrides) -> Word:
        fields = {
            "english": fake.unique.word(),
            "turkish": fake.unique.word(),
            "created_at": now,
            "next_review": now,
        }
        fields.update(overrides)
        return Word(**fields)
    return _make


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh in-memory database session for each test."""
    engine = make_engine("sqlite://")
    init_db(engine)
    session = sessionmaker(autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
