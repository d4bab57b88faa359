from django.shortcuts import get_object_or_404
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from courses.models import Lesson
from learning.models import Enrollment
from learning.serializers import (
    LessonContentSerializer, LessonNavSerializer, LessonProgressIn,
    LessonProgressSerializer, MyEnrollmentSerializer,
)
from learning.services import (
    get_published_course, lesson_navigation, record_lesson_view,
    require_enrollment, set_lesson_progress,
)


class EnrollmentViewSet(mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        viewsets.GenericViewSet):
    """/me/enrollments/: the current learner's enrollments with lesson progress."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = MyEnrollmentSerializer

    def get_queryset(self):
        return (
            Enrollment.objects
            .filter(user=self.request.user)
            .select_related("course")
            .order_by("enrolled_at")
        )


class LessonDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: dict}, description="Lesson content with prev/next navigation; records the view.")
    def get(self, request, course_pk, lesson_pk):
        course = get_published_course(course_pk, request.user)
        enrollment = require_enrollment(
            request.user, course, "You must be enrolled in this course to view lesson content."
        )
        lesson = get_object_or_404(Lesson, pk=lesson_pk, course=course)

        progress = record_lesson_view(request.user, lesson, enrollment)
        prev_lesson, next_lesson = lesson_navigation(lesson)

        return Response({
            "lesson": LessonContentSerializer(lesson).data,
            "progress": LessonProgressSerializer(progress).data,
            "navigation": {
                "previous": LessonNavSerializer(prev_lesson).data if prev_lesson else None,
                "next": LessonNavSerializer(next_lesson).data if next_lesson else None,
            },
        })


class LessonProgressView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=LessonProgressIn, responses={200: LessonProgressSerializer})
    def post(self, request, course_pk, lesson_pk):
        ser = LessonProgressIn(data=request.data)
        ser.is_valid(raise_exception=True)

        course = get_published_course(course_pk, request.user)
        enrollment = require_enrollment(
            request.user, course, "You must be enrolled in this course to track progress."
        )
        lesson = get_object_or_404(Lesson, pk=lesson_pk, course=course)

        progress = set_lesson_progress(request.user, lesson, enrollment, ser.validated_data["status"])
        enrollment.refresh_from_db(fields=["status", "started_at", "completed_at"])

        return Response({
            "progress": LessonProgressSerializer(progress).data,
            "enrollment_status": enrollment.status,
        }, status=status.HTTP_200_OK)
