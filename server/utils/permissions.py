from rest_framework.permissions import BasePermission, SAFE_METHODS

from ._enum import Role


def is_staff_role(user) -> bool:
    """superadmin / instructor may author content, learners may not."""
    if not (user and user.is_authenticated):
        return False
    role = user.role
    if role == Role.SUPERADMIN:
        return True
    if role == Role.INSTRUCTOR:
        return True
    if role == Role.LEARNER:
        return False
    raise ValueError(f"Unknown role: {role!r}")


def can_manage_course(user, course) -> bool:
    if not (user and user.is_authenticated):
        return False
    role = user.role
    if role == Role.SUPERADMIN:
        return True
    if role == Role.INSTRUCTOR:
        return course.responsible_id == user.id
    if role == Role.LEARNER:
        return False
    raise ValueError(f"Unknown role: {role!r}")


def _course_of(obj):
    # Course itself, or anything hanging off one (lesson, quiz, invitation, question, option)
    if hasattr(obj, "responsible_id"):
        return obj
    if hasattr(obj, "course"):
        return obj.course
    if hasattr(obj, "quiz"):
        return obj.quiz.course
    if hasattr(obj, "question"):
        return obj.question.quiz.course
    return None


class IsSuperAdminOrReadOnly(BasePermission):
    """
    - Any authenticated user may use SAFE_METHODS (GET/HEAD/OPTIONS).
    - Write methods require role == superadmin.
    """
    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return user.role == Role.SUPERADMIN


class IsSuperAdmin(BasePermission):
    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == Role.SUPERADMIN)


class IsInstructorOrSuperAdmin(BasePermission):
    """
    Course authoring: instructors manage the courses they are responsible for,
    superadmins manage everything.
    """
    message = "Only instructors and administrators can manage courses."

    def has_permission(self, request, view):
        return is_staff_role(request.user)

    def has_object_permission(self, request, view, obj):
        course = _course_of(obj)
        return course is not None and can_manage_course(request.user, course)
