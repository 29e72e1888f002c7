"""Repository activity classification."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Sequence

from .git import Commit


class ActivityStatus(str, Enum):
    """Derived liveness of a repository."""

    ACTIVE = "active"
    # Forks with no commits since they were created.
    DEAD_END_FORK = "dead-end-fork"
    # Forks with less than 3 commits, all within a week from creation.
    QUICK_FORK = "quick-fork"
    # No commits for NO_RECENT_COMMITS_AFTER.
    NO_RECENT_COMMITS = "no-recent-commits"
    # NO_RECENT_COMMITS and nothing imports it. Derived later from import
    # counts held in the index, never by the crawler.
    INACTIVE = "inactive"


NO_RECENT_COMMITS_AFTER = timedelta(days=2 * 365)
ONE_WEEK = timedelta(days=7)

# Head of the default branch plus its two immediate ancestors.
COMMIT_SAMPLE_SIZE = 3


def is_quick_fork(commits: Sequence[Commit], created_at: datetime, now: datetime) -> bool:
    """Report whether a fork is a "quick fork".

    A quick fork has fewer than 3 commits, all within a week of the fork's
    creation. ``commits`` must be newest first.
    """
    one_week_old = created_at + ONE_WEEK
    if one_week_old > now:
        # A newborn repository.
        return False
    if len(commits) >= COMMIT_SAMPLE_SIZE:
        return False
    for commit in commits:
        if commit.authored_at > one_week_old:
            return False
        if commit.authored_at < created_at:
            break
    return True


def classify_activity(
    commits: Sequence[Commit],
    is_fork: bool,
    created_at: datetime,
    pushed_at: datetime,
    now: datetime,
) -> ActivityStatus:
    """Classify a repository from its newest commits and fork metadata.

    ``commits`` is the default branch head followed by up to two ancestors.
    """
    if not commits:
        return ActivityStatus.NO_RECENT_COMMITS

    head = commits[0]
    if now - head.authored_at > NO_RECENT_COMMITS_AFTER:
        return ActivityStatus.NO_RECENT_COMMITS

    if is_fork:
        if pushed_at < created_at:
            return ActivityStatus.DEAD_END_FORK
        if is_quick_fork(commits[:COMMIT_SAMPLE_SIZE], created_at, now):
            return ActivityStatus.QUICK_FORK

    return ActivityStatus.ACTIVE
