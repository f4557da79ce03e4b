"""Quiz question generation with review priority."""
import logging
import random
from datetime import datetime
from typing import List, Optional, Sequence, Union

from vocabquiz.config import settings
from vocabquiz.models.quiz_models import Question, QuestionType, QuizMode, Word
from vocabquiz.timestamps import resolve_now

logger = logging.getLogger(__name__)


MODE_QUESTION_TYPES = {
    QuizMode.MULTIPLE_CHOICE: QuestionType.MULTIPLE_CHOICE,
    QuizMode.FILL_IN: QuestionType.FILL_IN,
    QuizMode.LISTENING: QuestionType.LISTENING,
    QuizMode.REVERSE: QuestionType.REVERSE,
}

# Mixed mode draws from these two only.
MIXED_QUESTION_TYPES = (QuestionType.MULTIPLE_CHOICE, QuestionType.FILL_IN)


def as_mode(mode: Union[QuizMode, str]) -> QuizMode:
    """Coerce a mode name into a QuizMode; raises ValueError if unknown."""
    if isinstance(mode, QuizMode):
        return mode
    try:
        return QuizMode(mode)
    except ValueError:
        raise ValueError(f"Unknown quiz mode: {mode}") from None


class QuestionGenerator:
    """Selects words and builds quiz questions."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        min_words: int = settings.quiz.min_words,
        options_count: int = settings.quiz.options_count,
    ):
        """Initialize the generator with an optional random source."""
        self.rng = rng or random.Random()
        self.min_words = min_words
        self.options_count = options_count

    def prioritize(self, pool: Sequence[Word], now: datetime) -> List[Word]:
        """Order words: due first, then lowest level, ties at random."""
        keyed = [
            (0 if word.is_due(now) else 1, word.level or 1, self.rng.random(), index, word)
            for index, word in enumerate(pool)
        ]
        keyed.sort(key=lambda item: item[:4])
        return [item[-1] for item in keyed]

    def select_words(self, pool: Sequence[Word], count: int, now: datetime) -> List[Word]:
        """Pick the highest-priority words, then shuffle them for display."""
        selected = self.prioritize(pool, now)[:min(count, len(pool))]
        self.rng.shuffle(selected)
        return selected

    def question_type_for(self, mode: QuizMode) -> QuestionType:
        if mode == QuizMode.MIXED:
            return self.rng.choice(MIXED_QUESTION_TYPES)
        return MODE_QUESTION_TYPES[mode]

    def generate_questions(
        self,
        pool: Sequence[Word],
        count: int = settings.quiz.question_count,
        mode: Union[QuizMode, str] = QuizMode.MIXED,
        now: Optional[datetime] = None,
    ) -> Optional[List[Question]]:
        """Generate up to ``count`` questions from ``pool``.

        Returns None when the pool is too small to build multiple-choice
        options.
        """
        mode = as_mode(mode)
        if len(pool) < self.min_words:
            logger.info(f"Not enough words for a quiz: {len(pool)} < {self.min_words}")
            return None

        now = resolve_now(now)
        words = self.select_words(pool, count, now)
        questions = [
            self.build_question(word, self.question_type_for(mode), pool, f"q-{word.id}-{index}")
            for index, word in enumerate(words)
        ]
        logger.debug(f"Generated {len(questions)} questions in {mode.value} mode from {len(pool)} words")
        return questions

    def build_question(
        self,
        word: Word,
        question_type: QuestionType,
        pool: Sequence[Word],
        question_id: str,
    ) -> Question:
        """Build one question of the given type for a word."""
        if question_type == QuestionType.MULTIPLE_CHOICE:
            return Question(
                id=question_id,
                type=question_type,
                question=word.english,
                correct_answer=word.turkish,
                options=self._build_options(word, pool),
                word=word,
            )
        if question_type == QuestionType.REVERSE:
            return Question(
                id=question_id,
                type=question_type,
                question=word.turkish,
                correct_answer=word.english,
                word=word,
            )
        # fill-in and listening share the same payload
        return Question(
            id=question_id,
            type=question_type,
            question=word.english,
            correct_answer=word.turkish,
            word=word,
        )

    def _build_options(self, word: Word, pool: Sequence[Word]) -> List[str]:
        """Correct answer plus distractors from other words, shuffled."""
        wanted = self.options_count - 1
        others = [other.turkish for other in pool if other.id != word.id]

        distinct = list(dict.fromkeys(t for t in others if t != word.turkish))
        distractors = self.rng.sample(distinct, min(wanted, len(distinct)))

        if len(distractors) < wanted:
            # Too few distinct translations: fall back to repeats, then to
            # values equal to the correct answer.
            repeats = [t for t in others if t != word.turkish]
            same = [t for t in others if t == word.turkish]
            self.rng.shuffle(repeats)
            distractors.extend((repeats + same)[:wanted - len(distractors)])

        options = [word.turkish] + distractors
        self.rng.shuffle(options)
        return options
