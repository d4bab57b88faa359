from django.db.models import Avg, Count, Sum

from courses.models import Lesson
from learning.models import Enrollment
from quizzes.models import QuizAttempt
from utils._enum import ProgressStatus


def course_report(course):
    """Enrollment and quiz figures for one course, for its instructor."""
    enrollments = Enrollment.objects.filter(course=course)

    by_status = {value: 0 for value in ProgressStatus.values}
    for row in enrollments.values("status").annotate(n=Count("id")):
        by_status[row["status"]] = row["n"]
    total = sum(by_status.values())

    time_agg = enrollments.aggregate(total=Sum("time_spent_seconds"), avg=Avg("time_spent_seconds"))
    quiz_agg = QuizAttempt.objects.filter(quiz__course=course).aggregate(
        n=Count("id"), avg=Avg("score"), points=Sum("points_earned"),
    )

    completed = by_status[ProgressStatus.COMPLETED]
    return {
        "course_id": course.pk,
        "total_enrollments": total,
        "enrollments_by_status": by_status,
        "completion_rate": round(completed * 100 / total, 2) if total else 0.0,
        "total_time_spent_seconds": time_agg["total"] or 0,
        "average_time_spent_seconds": round(float(time_agg["avg"] or 0), 2),
        "lesson_count": Lesson.objects.filter(course=course).count(),
        "quiz_attempts": quiz_agg["n"] or 0,
        "average_quiz_score": round(float(quiz_agg["avg"] or 0), 2),
        "points_awarded": quiz_agg["points"] or 0,
    }
