"""Point awards and daily streaks.

A valid message earns ``BASE_POINTS``. Activity on the day after the last
activity extends the streak and adds ``STREAK_BONUS``; same-day activity keeps
the streak without a bonus; any longer gap (or no prior activity) restarts the
streak at 1. A boosted request costs ``BOOST_COST``.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from chronochat.core.errors import InsufficientPoints
from chronochat.db.models import UserPoints

BASE_POINTS = 1
STREAK_BONUS = 5
BOOST_COST = 10

DateLike = Union[date, datetime, str]


@dataclass(frozen=True)
class Reward:
    points_awarded: int
    new_streak: int
    points_cost: int


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def as_date(value: Optional[DateLike]) -> Optional[date]:
    """Normalize a calendar day; ISO strings may carry a time part."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def compute_reward(
    last_activity_date: Optional[DateLike],
    today: DateLike,
    current_streak: int,
    boost_requested: bool,
) -> Reward:
    last = as_date(last_activity_date)
    today = as_date(today)
    points = BASE_POINTS
    streak = 1
    if last is not None and last == today - timedelta(days=1):
        streak = current_streak + 1
        points += STREAK_BONUS
    elif last is not None and last == today:
        streak = current_streak
    cost = BOOST_COST if boost_requested else 0
    return Reward(points_awarded=points, new_streak=streak, points_cost=cost)


def apply_reward(ledger: UserPoints, reward: Reward, today: DateLike) -> None:
    ledger.total_points = max(0, ledger.total_points + reward.points_awarded - reward.points_cost)
    ledger.points_spent += reward.points_cost
    ledger.current_streak = reward.new_streak
    ledger.last_activity_date = as_date(today)


def debit(ledger: UserPoints, cost: int) -> None:
    """Charge a shop purchase; the balance must cover it."""
    if ledger.total_points < cost:
        raise InsufficientPoints(required=cost, available=ledger.total_points)
    ledger.total_points -= cost
    ledger.points_spent += cost
