from __future__ import annotations

import logging
from decimal import Decimal

from domain.models import GoalProgress, percent_of
from domain.schemas import Goal, Transaction

logger = logging.getLogger(__name__)

MILESTONE_STEP = 25


def band_crossed(old_percent: int, new_percent: int) -> bool:
    """True when progress enters a higher 25% band."""
    return old_percent // MILESTONE_STEP < new_percent // MILESTONE_STEP


def milestone_crossed(old_percent: int, new_percent: int) -> bool:
    """True when progress completes the goal or enters a new 25% band."""
    return new_percent >= 100 or band_crossed(old_percent, new_percent)


def find_goal(goals: list[Goal], name: str) -> Goal | None:
    wanted = name.lower()
    return next((g for g in goals if g.name.lower() == wanted), None)


class GoalTracker:
    """Credits transactions whose category names a savings goal."""

    def apply(self, goals: list[Goal], transaction: Transaction) -> tuple[list[Goal], bool]:
        goal = find_goal(goals, transaction.category)
        if goal is None:
            logger.debug("GoalTracker no goal for category=%s txn_id=%s", transaction.category, transaction.id)
            return goals, False

        progress = self.set_progress(goal, goal.saved + transaction.amount)
        return goals, progress.milestone_crossed

    def set_progress(self, goal: Goal, saved: Decimal | None = None, target: Decimal | None = None) -> GoalProgress:
        old_percent = goal.percent
        if saved is not None:
            goal.saved = saved
        if target is not None:
            goal.target = target
        goal.percent = percent_of(goal.saved, goal.target)

        progress = GoalProgress(
            name=goal.name,
            old_percent=old_percent,
            new_percent=goal.percent,
            milestone_crossed=milestone_crossed(old_percent, goal.percent),
        )
        logger.info(
            "GoalTracker updated goal=%s saved=%s target=%s percent=%d->%d milestone=%s",
            goal.name,
            goal.saved,
            goal.target,
            progress.old_percent,
            progress.new_percent,
            progress.milestone_crossed,
        )
        return progress
