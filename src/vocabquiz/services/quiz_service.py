"""Quiz session state machine and answer grading."""
import logging
import re
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

from vocabquiz import monitoring
from vocabquiz.config import settings
from vocabquiz.models.quiz_models import (
    AnswerResult,
    Question,
    QuestionType,
    QuizMode,
    QuizResults,
    Word,
    round_percentage,
)
from vocabquiz.services.question_generator import QuestionGenerator, as_mode
from vocabquiz.services.word_service import WordService

logger = logging.getLogger(__name__)

ALL = "all"

PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")


class QuizState(Enum):
    """Lifecycle of a quiz session."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class QuizStateError(RuntimeError):
    """Raised when an operation is not valid in the current quiz state."""


def normalize_answer(text: str) -> str:
    """Lowercase, strip punctuation and surrounding whitespace."""
    return PUNCTUATION.sub("", text.lower()).strip()


def is_correct_answer(question: Question, answer: str, skip_answer: str = settings.quiz.skip_answer) -> bool:
    """Grade an answer against a question.

    Multiple-choice answers must match the correct option exactly. Typed
    answers are compared after normalization and accept any one of the
    comma-separated synonyms, or the whole correct string.
    """
    if answer is None or answer == skip_answer:
        return False

    if question.type == QuestionType.MULTIPLE_CHOICE:
        return answer == question.correct_answer

    user_parts = {part for part in map(normalize_answer, answer.split(",")) if part}
    correct_parts = {part for part in map(normalize_answer, question.correct_answer.split(",")) if part}
    if user_parts & correct_parts:
        return True

    whole = normalize_answer(answer)
    return bool(whole) and whole == normalize_answer(question.correct_answer)


class QuizSession:
    """Drives a single quiz attempt over the live word pool."""

    def __init__(
        self,
        word_service: WordService,
        generator: Optional[QuestionGenerator] = None,
        question_count: int = settings.quiz.question_count,
    ):
        """Initialize the session with the word repository and generator."""
        self.word_service = word_service
        self.generator = generator or QuestionGenerator()
        self.question_count = question_count
        self.reset()

    def reset(self) -> None:
        """Discard any quiz in progress."""
        self.questions: Optional[List[Question]] = None
        self.current_index = 0
        self.answers: Dict[str, str] = {}
        self.is_complete = False
        self.review_mode = False
        self.mode = QuizMode.MIXED
        self.category = ALL
        self.folder = ALL

    @property
    def state(self) -> QuizState:
        if self.questions is None:
            return QuizState.NOT_STARTED
        if self.is_complete:
            return QuizState.COMPLETE
        return QuizState.IN_PROGRESS

    @property
    def current_question(self) -> Optional[Question]:
        if self.questions is None or self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def total_questions(self) -> int:
        return len(self.questions) if self.questions else 0

    def filter_words(self, category: str = ALL, folder: str = ALL) -> List[Word]:
        """Words of the live pool matching the category and folder filters."""
        words = self.word_service.list_words()
        if category != ALL:
            words = [w for w in words if w.category == category]
        if folder != ALL:
            words = [w for w in words if (w.folder or settings.quiz.default_folder) == folder]
        return words

    def start_quiz(
        self,
        questions: Optional[Sequence[Question]] = None,
        mode: Union[QuizMode, str] = QuizMode.MIXED,
        category: str = ALL,
        folder: str = ALL,
        now: Optional[datetime] = None,
    ) -> bool:
        """Start a quiz, discarding any unfinished one.

        Explicit ``questions`` start a review quiz. Otherwise questions are
        generated from the filtered word pool. Returns False when there are
        not enough words; the session is then left untouched.
        """
        mode = as_mode(mode)
        if questions is None:
            pool = self.filter_words(category, folder)
            generated = self.generator.generate_questions(pool, self.question_count, mode, now)
            if not generated:
                logger.warning(
                    f"Cannot start {mode.value} quiz: {len(pool)} words match "
                    f"category={category!r} folder={folder!r}"
                )
                return False
            review = False
        else:
            generated = list(questions)
            if not generated:
                return False
            review = True

        self.questions = generated
        self.current_index = 0
        self.answers = {}
        self.is_complete = False
        self.review_mode = review
        self.mode = mode
        self.category = category
        self.folder = folder

        monitoring.quizzes_started.labels(mode=mode.value).inc()
        logger.info(f"Started {'review ' if review else ''}quiz with {len(generated)} questions ({mode.value})")
        return True

    def submit_answer(self, question_id: str, answer: str) -> None:
        """Record an answer and advance to the next question."""
        if self.state != QuizState.IN_PROGRESS:
            raise QuizStateError(f"Cannot submit an answer while quiz is {self.state.value}")

        current = self.current_question
        if current is not None and current.id != question_id:
            logger.warning(f"Answer for {question_id} submitted while {current.id} is current")

        self.answers[question_id] = answer
        logger.debug(f"Answer recorded for {question_id}")

        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
        else:
            self.is_complete = True
            logger.info("Quiz complete")

    def skip_question(self, question_id: str) -> None:
        """Give up on a question; it always grades as incorrect."""
        self.submit_answer(question_id, settings.quiz.skip_answer)

    def find_question(self, question_id: str) -> Optional[Question]:
        if not self.questions:
            return None
        return next((q for q in self.questions if q.id == question_id), None)

    def check_answer(self, question_id: str, answer: str) -> bool:
        """Grade an answer for a question of this session."""
        question = self.find_question(question_id)
        if not question:
            return False
        return is_correct_answer(question, answer)

    def get_results(self) -> Optional[QuizResults]:
        """Aggregate graded answers. None if no quiz was started."""
        if not self.questions:
            return None

        results = []
        for question in self.questions:
            answer = self.answers.get(question.id) or ""
            results.append(AnswerResult(question, answer, is_correct_answer(question, answer)))

        total = len(results)
        correct = sum(1 for r in results if r.is_correct)
        wrong_answers = [r for r in results if not r.is_correct]

        return QuizResults(
            total=total,
            correct=correct,
            incorrect=total - correct,
            percentage=round_percentage(correct, total),
            results=results,
            wrong_answers=wrong_answers,
            category=self.category,
            folder=self.folder,
            mode=self.mode,
            is_review=self.review_mode,
        )

    def start_review_quiz(self) -> bool:
        """Start a quiz over the questions answered wrongly.

        Question types are preserved; multiple-choice questions get fresh
        distractors from the live word pool.
        """
        results = self.get_results()
        if not results or not results.wrong_answers:
            return False

        pool = self.word_service.list_words()
        questions = [
            self.generator.build_question(
                wrong.question.word,
                wrong.question.type,
                pool,
                f"review-{wrong.question.word.id}-{index}",
            )
            for index, wrong in enumerate(results.wrong_answers)
        ]
        return self.start_quiz(questions, self.mode, self.category, self.folder)
