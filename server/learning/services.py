import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from courses.models import Course, CourseInvitation, Lesson
from learning.models import Enrollment, LessonProgress
from utils._enum import ProgressStatus
from utils.exceptions import PaymentRequired

logger = logging.getLogger(__name__)

NOT_STARTED = ProgressStatus.NOT_STARTED
IN_PROGRESS = ProgressStatus.IN_PROGRESS
COMPLETED = ProgressStatus.COMPLETED


# ============ Lookups shared by the learner-facing views ============
def get_published_course(course_id, user=None):
    """Unpublished and missing courses are both reported as 404."""
    course = get_object_or_404(Course, pk=course_id, published=True)
    if course.visibility == "signed_in" and not (user and user.is_authenticated):
        raise PermissionDenied("You must be signed in to view this course.")
    return course


def require_enrollment(user, course, message="You must be enrolled in this course."):
    enrollment = Enrollment.objects.filter(user=user, course=course).first()
    if enrollment is None:
        raise PermissionDenied(message)
    return enrollment


# ============ Enrollment creation ============
def enroll_user(user, course):
    """
    Create a not_started enrollment for (user, course).
    Returns (enrollment, created); an existing enrollment is returned as-is.
    Open access, accepted invitations and verified payments all end up here.
    """
    enrollment, created = Enrollment.objects.get_or_create(
        user=user, course=course,
        defaults={"status": NOT_STARTED, "enrolled_at": timezone.now()},
    )
    if created:
        logger.info("Enrolled user=%s in course=%s", user.pk, course.pk)
    return enrollment, created


@transaction.atomic
def enroll_with_access_rule(user, course):
    existing = Enrollment.objects.filter(user=user, course=course).first()
    if existing:
        return existing, False

    if course.access_rule == "payment":
        raise PaymentRequired()

    if course.access_rule == "invitation":
        invitation = (
            CourseInvitation.objects.select_for_update()
            .filter(course=course, email__iexact=user.email or "", status="pending")
            .first()
        )
        if invitation is None:
            raise PermissionDenied("You need an invitation to enroll in this course.")
        invitation.status = "accepted"
        invitation.save(update_fields=["status"])

    return enroll_user(user, course)


@transaction.atomic
def accept_invitation(user, invitation):
    """Accepting twice or while already enrolled is not an error."""
    if invitation.status != "accepted":
        invitation.status = "accepted"
        invitation.save(update_fields=["status"])
    return enroll_user(user, invitation.course)


# ============ Enrollment status transitions ============
def _mark_enrollment_started(enrollment, now):
    updated = (
        Enrollment.objects
        .filter(pk=enrollment.pk, status=NOT_STARTED)
        .update(status=IN_PROGRESS, started_at=now)
    )
    if updated:
        enrollment.status = IN_PROGRESS
        enrollment.started_at = now
    return bool(updated)


def _mark_enrollment_completed(enrollment, now):
    updated = (
        Enrollment.objects
        .filter(pk=enrollment.pk)
        .exclude(status=COMPLETED)
        .update(status=COMPLETED, completed_at=now)
    )
    if updated:
        Enrollment.objects.filter(pk=enrollment.pk, started_at__isnull=True).update(started_at=now)
        logger.info("Enrollment %s completed (user=%s course=%s)", enrollment.pk, enrollment.user_id, enrollment.course_id)
    return bool(updated)


def refresh_enrollment_status(enrollment, now=None):
    """
    Derive the course-level status from the learner's lesson progress.
    - every lesson of the course completed (and at least one lesson) -> completed
    - otherwise a not_started enrollment is promoted to in_progress
    Only set membership matters, completion order does not.
    """
    now = now or timezone.now()
    lesson_ids = set(
        Lesson.objects.filter(course_id=enrollment.course_id).values_list("id", flat=True)
    )
    completed_ids = set(
        LessonProgress.objects
        .filter(user_id=enrollment.user_id, lesson__course_id=enrollment.course_id, status=COMPLETED)
        .values_list("lesson_id", flat=True)
    )

    # an empty course is never completed through lesson progress
    if lesson_ids and lesson_ids <= completed_ids:
        _mark_enrollment_completed(enrollment, now)
    elif enrollment.status == NOT_STARTED:
        _mark_enrollment_started(enrollment, now)

    enrollment.refresh_from_db(fields=["status", "started_at", "completed_at"])
    return enrollment


# ============ Lesson progress ============
def _initial_progress_fields(status, now):
    fields = {"status": status}
    if status in (IN_PROGRESS, COMPLETED):
        fields["started_at"] = now
    if status == COMPLETED:
        fields["completed_at"] = now
    return fields


def set_lesson_progress(user, lesson, enrollment, new_status):
    """
    Record `new_status` for (user, lesson).
    A completed lesson never goes back: a lower status returns the stored row unchanged.
    """
    if new_status not in ProgressStatus.values:
        raise ValueError(f"Unknown progress status: {new_status!r}")
    if lesson.course_id != enrollment.course_id or enrollment.user_id != user.pk:
        raise ValueError("Lesson and enrollment do not belong together.")

    now = timezone.now()
    with transaction.atomic():
        # serialises progress writes of one learner in one course
        enrollment = Enrollment.objects.select_for_update().get(pk=enrollment.pk)

        progress, created = LessonProgress.objects.select_for_update().get_or_create(
            user=user, lesson=lesson,
            defaults=_initial_progress_fields(new_status, now),
        )

        if not created:
            if progress.status == COMPLETED and new_status != COMPLETED:
                return progress

            was_completed = progress.status == COMPLETED
            progress.status = new_status
            if new_status in (IN_PROGRESS, COMPLETED) and progress.started_at is None:
                progress.started_at = now
            if new_status == COMPLETED and not was_completed:
                progress.completed_at = now
            progress.save(update_fields=["status", "started_at", "completed_at"])

        if new_status == IN_PROGRESS:
            _mark_enrollment_started(enrollment, now)
        elif new_status == COMPLETED:
            refresh_enrollment_status(enrollment, now)

    return progress


def record_lesson_view(user, lesson, enrollment):
    """
    Opening a lesson counts as engagement, not completion:
    a missing progress row is created as not_started and a not_started
    enrollment moves to in_progress.
    """
    now = timezone.now()
    with transaction.atomic():
        progress, created = LessonProgress.objects.get_or_create(
            user=user, lesson=lesson,
            defaults={"status": NOT_STARTED},
        )
        if created:
            _mark_enrollment_started(enrollment, now)
    return progress


def lesson_navigation(lesson):
    """(previous, next) lessons of the same course by sort_order."""
    ordered = list(
        Lesson.objects.filter(course_id=lesson.course_id)
        .order_by("sort_order", "id")
        .only("id", "title", "type", "sort_order")
    )
    ids = [l.id for l in ordered]
    idx = ids.index(lesson.id)
    prev_lesson = ordered[idx - 1] if idx > 0 else None
    next_lesson = ordered[idx + 1] if idx < len(ordered) - 1 else None
    return prev_lesson, next_lesson


def progress_summary(enrollment):
    total = Lesson.objects.filter(course_id=enrollment.course_id).count()
    completed = LessonProgress.objects.filter(
        user_id=enrollment.user_id,
        lesson__course_id=enrollment.course_id,
        status=COMPLETED,
    ).count()
    percent = round(completed / total * 100) if total else 0
    return {"total_lessons": total, "completed_lessons": completed, "percent": percent}
