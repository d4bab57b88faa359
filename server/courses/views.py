import logging

from django.db.models import F
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from courses.models import Course, CourseInvitation, Lesson
from courses.serializers import (
    CourseInvitationSerializer, CourseReportSerializer, CourseSerializer, LessonSerializer,
)
from courses.services import course_report
from learning.serializers import EnrollmentSerializer
from learning.services import accept_invitation, enroll_with_access_rule, get_published_course
from utils._enum import Role
from utils.filter_params import COURSE_FILTER_PARAMS
from utils.permissions import IsInstructorOrSuperAdmin, can_manage_course, is_staff_role
from utils.send_mail import send_address_email, send_user_email

logger = logging.getLogger(__name__)


def managed_queryset(queryset, user, course_path=None):
    """Restrict authoring querysets to the courses `user` is responsible for."""
    role = user.role
    if role == Role.SUPERADMIN:
        return queryset
    if role == Role.INSTRUCTOR:
        lookup = f"{course_path}__responsible" if course_path else "responsible"
        return queryset.filter(**{lookup: user})
    if role == Role.LEARNER:
        return queryset.none()
    raise ValueError(f"Unknown role: {role!r}")


class CourseAuthoringMixin:
    """Writes are limited to courses the caller can manage."""
    permission_classes = [IsInstructorOrSuperAdmin]

    def course_for(self, serializer):
        raise NotImplementedError

    def check_course(self, serializer):
        if not can_manage_course(self.request.user, self.course_for(serializer)):
            raise PermissionDenied("You cannot manage this course.")

    def perform_create(self, serializer):
        self.check_course(serializer)
        serializer.save()

    def perform_update(self, serializer):
        self.check_course(serializer)
        serializer.save()


def _notify_enrolled(user, course):
    try:
        send_user_email(user, "enrollment_confirmed", "Enrollment confirmed", course_title=course.title)
    except Exception:
        logger.exception("Enrollment email failed for user=%s course=%s", user.pk, course.pk)


class CourseViewSet(viewsets.ModelViewSet):
    """
    Catalogue for learners (published courses), authoring for instructors
    (their own courses) and superadmins (all courses).
    """
    serializer_class = CourseSerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ["title"]

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [permissions.AllowAny()]
        if self.action == "enroll":
            return [permissions.IsAuthenticated()]
        return [IsInstructorOrSuperAdmin()]

    def get_queryset(self):
        user = self.request.user
        qs = Course.objects.select_related("responsible")

        if self.action in ("list", "retrieve") and not is_staff_role(user):
            qs = qs.filter(published=True)
            if not user.is_authenticated:
                qs = qs.filter(visibility="everyone")
        else:
            qs = managed_queryset(qs, user) if user.is_authenticated else qs.none()

        access_rule = self.request.query_params.get("access_rule")
        if access_rule:
            qs = qs.filter(access_rule=access_rule)
        return qs

    @extend_schema(parameters=COURSE_FILTER_PARAMS)
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        course = self.get_object()
        Course.objects.filter(pk=course.pk).update(views_count=F("views_count") + 1)
        course.refresh_from_db(fields=["views_count"])
        return Response(self.get_serializer(course).data)

    def perform_create(self, serializer):
        serializer.save(responsible=self.request.user)

    @extend_schema(request=None, responses={200: EnrollmentSerializer, 201: EnrollmentSerializer})
    @action(detail=True, methods=["post"])
    def enroll(self, request, pk=None):
        course = get_published_course(pk, request.user)
        enrollment, created = enroll_with_access_rule(request.user, course)
        if created:
            _notify_enrolled(request.user, course)
        return Response(
            EnrollmentSerializer(enrollment).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(responses={200: CourseReportSerializer})
    @action(detail=True, methods=["get"])
    def report(self, request, pk=None):
        course = self.get_object()
        return Response(CourseReportSerializer(course_report(course)).data)


class LessonViewSet(CourseAuthoringMixin, viewsets.ModelViewSet):
    serializer_class = LessonSerializer

    def get_queryset(self):
        qs = Lesson.objects.select_related("course").order_by("course_id", "sort_order", "id")
        course_id = self.request.query_params.get("course")
        if course_id:
            qs = qs.filter(course_id=course_id)
        return managed_queryset(qs, self.request.user, "course")

    def course_for(self, serializer):
        return serializer.validated_data.get("course") or serializer.instance.course


class InvitationViewSet(mixins.CreateModelMixin,
                        mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        mixins.DestroyModelMixin,
                        viewsets.GenericViewSet):
    """
    Staff invite addresses to their courses; a learner sees the invitations
    sent to their own email and accepts them.
    """
    serializer_class = CourseInvitationSerializer

    def get_permissions(self):
        if self.action in ("list", "retrieve", "accept"):
            return [permissions.IsAuthenticated()]
        return [IsInstructorOrSuperAdmin()]

    def get_queryset(self):
        user = self.request.user
        qs = CourseInvitation.objects.select_related("course", "invited_by")
        if is_staff_role(user):
            return managed_queryset(qs, user, "course")
        return qs.filter(email__iexact=getattr(user, "email", "") or "", course__published=True)

    def perform_create(self, serializer):
        course = serializer.validated_data["course"]
        if not can_manage_course(self.request.user, course):
            raise PermissionDenied("You cannot manage this course.")
        invitation = serializer.save(invited_by=self.request.user)
        try:
            send_address_email(
                invitation.email,
                "course_invitation",
                f"You are invited to {course.title}",
                inviter=self.request.user.name or self.request.user.username,
                course_title=course.title,
            )
        except Exception:
            logger.exception("Invitation email failed for invitation=%s", invitation.pk)

    @extend_schema(request=None, responses={200: EnrollmentSerializer, 201: EnrollmentSerializer})
    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):
        invitation = get_object_or_404(CourseInvitation.objects.select_related("course"), pk=pk)
        get_published_course(invitation.course_id, request.user)
        if (request.user.email or "").lower() != invitation.email:
            raise PermissionDenied("This invitation was sent to another email address.")

        enrollment, created = accept_invitation(request.user, invitation)
        if created:
            _notify_enrolled(request.user, invitation.course)
        return Response(
            EnrollmentSerializer(enrollment).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
