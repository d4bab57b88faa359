from rest_framework import serializers

from courses.models import Course, Lesson
from learning.models import Enrollment, LessonProgress
from learning.services import progress_summary
from utils._enum import ProgressStatus


class CourseBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = ("id", "title", "description", "image_url", "access_rule", "price")
        read_only_fields = fields


class EnrollmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Enrollment
        fields = (
            "id", "course", "status", "enrolled_at",
            "started_at", "completed_at", "time_spent_seconds",
        )
        read_only_fields = fields


class MyEnrollmentSerializer(EnrollmentSerializer):
    course = CourseBriefSerializer(read_only=True)
    progress = serializers.SerializerMethodField()

    class Meta(EnrollmentSerializer.Meta):
        fields = EnrollmentSerializer.Meta.fields + ("progress",)
        read_only_fields = fields

    def get_progress(self, obj):
        return progress_summary(obj)


class LessonProgressSerializer(serializers.ModelSerializer):
    class Meta:
        model = LessonProgress
        fields = ("id", "lesson", "status", "started_at", "completed_at")
        read_only_fields = fields


class LessonProgressIn(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProgressStatus.choices)


class LessonNavSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = ("id", "title", "type", "sort_order")
        read_only_fields = fields


class LessonContentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = (
            "id", "course", "title", "type", "description", "sort_order",
            "quiz", "video_url", "video_duration", "file_url", "allow_download",
        )
        read_only_fields = fields
