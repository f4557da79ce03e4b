"""Database models for the durable word and history store."""
from sqlalchemy import JSON, Column, DateTime, Integer, String

from vocabquiz.models.base import Base, TimestampMixin


class StoredWord(Base, TimestampMixin):
    """Persisted vocabulary word."""

    __tablename__ = "words"

    id = Column(String, primary_key=True)
    english = Column(String, nullable=False)
    turkish = Column(String, nullable=False)
    category = Column(String, nullable=False, default="General")
    folder = Column(String, nullable=False, default="General")
    part_of_speech = Column(String, default="")
    example = Column(String, default="")
    emoji = Column(String, default="")
    level = Column(Integer, nullable=False, default=1)  # 1-5
    next_review = Column(DateTime(timezone=True))
    last_reviewed = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True))


class StoredHistoryEntry(Base, TimestampMixin):
    """Persisted result of one completed quiz."""

    __tablename__ = "quiz_history"

    id = Column(String, primary_key=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    total = Column(Integer, nullable=False)
    correct = Column(Integer, nullable=False)
    incorrect = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)  # 0-100
    category = Column(String, nullable=False, default="all")
    folder = Column(String, nullable=False, default="all")
    mode = Column(String, nullable=False, default="mixed")
    wrong_answers = Column(JSON, nullable=False, default=list)  # serialized AnswerResult dicts
