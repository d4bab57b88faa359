from django.db import models
from django.utils import timezone
from users.models import User
from courses.models import Course, Lesson
from utils._enum import ProgressStatus


class Enrollment(models.Model):
    """
    A learner's registration in a course.
    `status` is derived from LessonProgress rows and never leaves `completed`.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='enrollments')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollments')
    status = models.CharField(max_length=20, choices=ProgressStatus.choices, default=ProgressStatus.NOT_STARTED)
    enrolled_at = models.DateTimeField(default=timezone.now)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    time_spent_seconds = models.IntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'course'], name='uq_enrollment_user_course')
        ]
        indexes = [
            models.Index(fields=['course', 'status'], name='idx_enrollment_course_status'),
            models.Index(fields=['user', 'enrolled_at'], name='idx_enrollment_user_date'),
        ]

    def __str__(self):
        return f"{self.user.username} · {self.course.title} ({self.status})"

    @property
    def is_completed(self):
        return self.status == ProgressStatus.COMPLETED


class LessonProgress(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='lesson_progress')
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name='progress')
    status = models.CharField(max_length=20, choices=ProgressStatus.choices, default=ProgressStatus.NOT_STARTED)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'lesson'], name='uq_lessonprogress_user_lesson')
        ]
        indexes = [models.Index(fields=['user', 'status'], name='idx_progress_user_status')]

    def __str__(self):
        return f"{self.user.username} · {self.lesson.title} ({self.status})"
