"""Daily streak and streak recovery calculation."""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Set

from vocabquiz.models.quiz_models import StreakStatus
from vocabquiz.timestamps import calendar_day

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def count_consecutive_days(days: Set[date], start: date) -> int:
    """Count present days walking backward from ``start`` until a gap."""
    count = 0
    current = start
    while current in days:
        count += 1
        current -= ONE_DAY
    return count


def calculate_streak_status(quiz_dates: Iterable[datetime], now: datetime) -> StreakStatus:
    """Derive the streak from the dates quizzes were completed on.

    The streak counts consecutive UTC days ending today, or ending
    yesterday if no quiz was taken today yet. A broken streak can be
    recovered when the last quiz was exactly two days ago; the potential
    streak then includes the recovered day.
    """
    days = {calendar_day(value) for value in quiz_dates}
    if not days:
        return StreakStatus(streak=0, can_recover=False)

    today = calendar_day(now)
    yesterday = today - ONE_DAY
    day_before_yesterday = today - 2 * ONE_DAY
    last_quiz_day = max(days)

    start = today if today in days else yesterday
    streak = count_consecutive_days(days, start)

    can_recover = streak == 0 and last_quiz_day == day_before_yesterday
    potential_streak = 0
    if can_recover:
        potential_streak = count_consecutive_days(days, day_before_yesterday) + 1

    logger.debug(f"Streak {streak} (last quiz {last_quiz_day}, can_recover={can_recover})")
    return StreakStatus(
        streak=streak,
        can_recover=can_recover,
        potential_streak=potential_streak,
        last_quiz_day=last_quiz_day,
    )
