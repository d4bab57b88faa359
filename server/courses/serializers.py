from rest_framework import serializers

from courses.models import Course, CourseInvitation, Lesson
from users.serializers import UserBriefSerializer


class CourseSerializer(serializers.ModelSerializer):
    responsible = UserBriefSerializer(read_only=True)
    lesson_count = serializers.IntegerField(source="lessons.count", read_only=True)

    class Meta:
        model = Course
        fields = (
            "id", "title", "description", "image_url", "visibility", "access_rule",
            "price", "published", "responsible", "views_count", "lesson_count",
            "created_at", "updated_at",
        )
        read_only_fields = ("views_count", "created_at", "updated_at")

    def validate(self, attrs):
        access_rule = attrs.get("access_rule", getattr(self.instance, "access_rule", "open"))
        price = attrs.get("price", getattr(self.instance, "price", None))
        if access_rule == "payment" and (price is None or price <= 0):
            raise serializers.ValidationError({"price": "Paid courses need a positive price."})
        return attrs


class LessonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = (
            "id", "course", "title", "type", "description", "sort_order", "quiz",
            "video_url", "video_duration", "file_url", "allow_download",
            "created_at", "updated_at",
        )
        read_only_fields = ("created_at", "updated_at")

    def validate(self, attrs):
        course = attrs.get("course") or getattr(self.instance, "course", None)
        lesson_type = attrs.get("type", getattr(self.instance, "type", None))
        quiz = attrs.get("quiz", getattr(self.instance, "quiz", None))
        if lesson_type == "quiz" and quiz is None:
            raise serializers.ValidationError({"quiz": "Quiz lessons must reference a quiz."})
        if quiz is not None and course is not None and quiz.course_id != course.id:
            raise serializers.ValidationError({"quiz": "Quiz belongs to another course."})
        return attrs


class CourseInvitationSerializer(serializers.ModelSerializer):
    invited_by = UserBriefSerializer(read_only=True)

    class Meta:
        model = CourseInvitation
        fields = ("id", "course", "email", "status", "invited_by", "created_at")
        read_only_fields = ("status", "invited_by", "created_at")

    def validate_email(self, value):
        return value.strip().lower()

    def validate(self, attrs):
        course = attrs.get("course") or getattr(self.instance, "course", None)
        email = attrs.get("email") or getattr(self.instance, "email", "")
        dupes = CourseInvitation.objects.filter(course=course, email__iexact=email)
        if self.instance is not None:
            dupes = dupes.exclude(pk=self.instance.pk)
        if dupes.exists():
            raise serializers.ValidationError({"email": "This address is already invited to the course."})
        return attrs


class CourseReportSerializer(serializers.Serializer):
    course_id = serializers.IntegerField()
    total_enrollments = serializers.IntegerField()
    enrollments_by_status = serializers.DictField(child=serializers.IntegerField())
    completion_rate = serializers.FloatField()
    total_time_spent_seconds = serializers.IntegerField()
    average_time_spent_seconds = serializers.FloatField()
    lesson_count = serializers.IntegerField()
    quiz_attempts = serializers.IntegerField()
    average_quiz_score = serializers.FloatField()
    points_awarded = serializers.IntegerField()
