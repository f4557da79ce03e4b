"""Configuration settings for the quiz engine."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

# Quiz settings
SKIP_ANSWER = "__SKIPPED__"  # sentinel submitted when the user gives up
MAX_IMPORT_BATCH_SIZE = 500  # hard cap of the durable store per commit


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabquiz.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class QuizSettings:
    """Quiz generation and grading settings."""
    question_count: int = int(os.getenv("QUIZ_QUESTION_COUNT", "10"))
    min_words: int = int(os.getenv("QUIZ_MIN_WORDS", "4"))
    options_count: int = int(os.getenv("QUIZ_OPTIONS_COUNT", "4"))
    max_level: int = int(os.getenv("MAX_LEVEL", "5"))
    default_category: str = os.getenv("DEFAULT_CATEGORY", "General")
    default_folder: str = os.getenv("DEFAULT_FOLDER", "General")
    skip_answer: str = SKIP_ANSWER


@dataclass
class StorageSettings:
    """Durable store synchronisation settings."""
    import_batch_size: int = int(os.getenv("IMPORT_BATCH_SIZE", "450"))
    flush_interval: float = float(os.getenv("FLUSH_INTERVAL_SECONDS", "2.0"))


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_quiz_settings() -> QuizSettings:
    """Get quiz settings."""
    return QuizSettings()


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    quiz: QuizSettings = field(default_factory=get_quiz_settings)
    storage: StorageSettings = field(default_factory=get_storage_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.storage.import_batch_size < 1 or \
           self.storage.import_batch_size > MAX_IMPORT_BATCH_SIZE:
            raise ValueError(f"IMPORT_BATCH_SIZE must be between 1 and {MAX_IMPORT_BATCH_SIZE}")

        if self.storage.flush_interval <= 0:
            raise ValueError("FLUSH_INTERVAL_SECONDS must be positive")

        if self.quiz.question_count < 1:
            raise ValueError("QUIZ_QUESTION_COUNT must be positive")

        if self.quiz.options_count < 2:
            raise ValueError("QUIZ_OPTIONS_COUNT must be at least 2")

        if self.quiz.min_words < self.quiz.options_count:
            raise ValueError("QUIZ_MIN_WORDS cannot be less than QUIZ_OPTIONS_COUNT")

        if self.quiz.max_level < 1:
            raise ValueError("MAX_LEVEL must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
