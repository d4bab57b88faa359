import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.db.models import F, Q, Sum
from django.utils import timezone

from progress.models import BadgeLevel
from quizzes.models import QuizAttempt
from users.models import User

logger = logging.getLogger(__name__)

LEADERBOARD_GROUP = "lb.all"


def _emit_leaderboard_changed():
    layer = get_channel_layer()
    if not layer:
        return
    async_to_sync(layer.group_send)(LEADERBOARD_GROUP, {"type": "lb.changed_all"})


def award_points(user, amount: int) -> int:
    """
    Add `amount` to user.total_points with a single UPDATE ... SET total_points = total_points + n.
    Returns the new total. Non-positive amounts are ignored.
    """
    amount = int(amount or 0)
    if amount <= 0:
        return user.total_points

    with transaction.atomic():
        User.objects.filter(pk=user.pk).update(
            total_points=F("total_points") + amount,
            updated_at=timezone.now(),
        )
        user.refresh_from_db(fields=["total_points", "updated_at"])
        # push only once the new total is visible to other connections
        transaction.on_commit(_emit_leaderboard_changed)

    logger.info("Awarded %s points to user=%s (total=%s)", amount, user.pk, user.total_points)
    return user.total_points


# ============ Badge tiers ============
def ordered_badges():
    return list(BadgeLevel.objects.order_by("sort_order", "min_points", "id"))


def current_badge(total_points: int, badges):
    """Highest min_points not above total_points, or None."""
    qualifying = [b for b in badges if b.min_points <= total_points]
    if not qualifying:
        return None
    return max(qualifying, key=lambda b: b.min_points)


def next_badge(current, badges):
    """Badge following `current` in sort order; the first badge when there is no current one."""
    if not badges:
        return None
    if current is None:
        return badges[0]
    ids = [b.id for b in badges]
    try:
        idx = ids.index(current.id)
    except ValueError:
        return None
    return badges[idx + 1] if idx + 1 < len(badges) else None


def badge_progress(total_points: int, current, nxt):
    if nxt is None:
        return None

    points_needed = max(0, nxt.min_points - total_points)
    if current is not None:
        span = nxt.min_points - current.min_points
        ratio = (total_points - current.min_points) / span if span > 0 else 1
    else:
        ratio = total_points / nxt.min_points if nxt.min_points > 0 else 1

    percent = int(ratio * 100 + 0.5)
    return {
        "badge": nxt,
        "points_needed": points_needed,
        "progress_percent": min(100, max(0, percent)),
    }


def points_summary(user):
    user.refresh_from_db(fields=["total_points"])
    total = user.total_points
    badges = ordered_badges()
    cur = current_badge(total, badges)
    nxt = next_badge(cur, badges)

    attempts = QuizAttempt.objects.filter(user=user)
    from_quizzes = attempts.aggregate(s=Sum("points_earned"))["s"] or 0

    return {
        "points": {"total": total, "from_quizzes": from_quizzes},
        "stats": {
            "total_quiz_attempts": attempts.count(),
            "perfect_scores": attempts.filter(score=100).count(),
        },
        "current_badge": cur,
        "progress_to_next_badge": badge_progress(total, cur, nxt),
        "all_badges": [
            {"id": b.id, "name": b.name, "min_points": b.min_points, "achieved": total >= b.min_points}
            for b in badges
        ],
    }


# ============ Leaderboard ============
def _row(user, rank, badges):
    badge = current_badge(user.total_points, badges)
    return {
        "rank": rank,
        "user": user,
        "total_points": user.total_points,
        "badge": badge,
    }


def leaderboard(limit: int, user=None):
    """
    Top `limit` users by (total_points desc, name asc); rank is the position.
    When `user` is outside the top rows, their own row is appended under
    `current_user` with rank = users ordered ahead of them + 1.
    """
    badges = ordered_badges()
    top = list(
        User.objects.filter(is_active=True)
        .order_by("-total_points", "name", "id")
        .only("id", "name", "username", "avatar", "total_points")[:limit]
    )
    rows = [_row(u, i, badges) for i, u in enumerate(top, start=1)]

    current_user = None
    if user is not None and user.is_authenticated and all(u.pk != user.pk for u in top):
        user.refresh_from_db(fields=["total_points", "name"])
        p = user.total_points
        ahead = User.objects.filter(is_active=True).filter(
            Q(total_points__gt=p)
            | Q(total_points=p, name__lt=user.name)
            | Q(total_points=p, name=user.name, id__lt=user.pk)
        ).count()
        current_user = _row(user, ahead + 1, badges)

    return {"leaderboard": rows, "current_user": current_user}
