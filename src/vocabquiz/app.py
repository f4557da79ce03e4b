"""Application composition root."""
import logging
import random
from typing import Optional

from sqlalchemy.orm import Session

from vocabquiz.config import settings
from vocabquiz.models.base import SessionLocal, init_db
from vocabquiz.monitoring import start_monitoring
from vocabquiz.services.history_service import HistoryService
from vocabquiz.services.learning_service import LearningService
from vocabquiz.services.question_generator import QuestionGenerator
from vocabquiz.services.quiz_service import QuizSession
from vocabquiz.services.stats_service import StatsService
from vocabquiz.services.store import SQLStore
from vocabquiz.services.word_service import WordService
from vocabquiz.services.write_queue import WriteBehindQueue


class VocabQuizApp:
    """Wires the engine services to the durable store."""

    def __init__(self, db: Optional[Session] = None, rng: Optional[random.Random] = None):
        """Initialize the application.

        Args:
            db: Optional session to use instead of one from SessionLocal.
            rng: Optional random source shared by quiz generation.
        """
        self.db = db
        self.rng = rng or random.Random()
        self.store: Optional[SQLStore] = None
        self.queue: Optional[WriteBehindQueue] = None
        self.word_service: Optional[WordService] = None
        self.history_service: Optional[HistoryService] = None
        self.learning_service: Optional[LearningService] = None
        self.stats_service: Optional[StatsService] = None
        self.generator = QuestionGenerator(self.rng)
        self.running = False
        self._owns_db = db is None
        self.logger = logging.getLogger(__name__)

    async def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        try:
            if self.db is None:
                init_db()
                self.db = SessionLocal()
                self.logger.info("Database initialized")

            self.store = SQLStore(self.db)
            self.queue = WriteBehindQueue(self.store)

            self.word_service = WordService(self.queue)
            self.word_service.load(self.store.load_words())
            self.history_service = HistoryService(self.queue)
            self.history_service.load(self.store.load_history())
            self.learning_service = LearningService(self.word_service, self.history_service)
            self.stats_service = StatsService(self.word_service, self.history_service)

            await self.queue.start()
            self.logger.info("Write-behind queue started")

            if settings.monitoring.enabled:
                start_monitoring(settings.monitoring.port)
                self.logger.info(f"Metrics served on port {settings.monitoring.port}")

            self.running = True
            self.logger.info("Application started")

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            self.running = True
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the application, flushing pending writes."""
        if not self.running:
            return

        try:
            if self.queue is not None:
                await self.queue.stop()
                self.logger.info("Write-behind queue stopped")

            if self.db is not None and self._owns_db:
                self.db.close()
                self.db = None
                self.logger.info("Database session closed")

            self.logger.info("Application stopped")
        finally:
            self.running = False

    def new_quiz_session(self) -> QuizSession:
        """Create a quiz session over the live word pool."""
        if not self.running:
            raise RuntimeError("Application is not started")
        return QuizSession(self.word_service, self.generator)
