from django.db import models
from users.models import User
from utils._enum import VISIBILITY, ACCESS_RULE, LESSON_TYPE, INVITATION_STATUS


class Course(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    visibility = models.CharField(max_length=20, choices=VISIBILITY, default="everyone")
    access_rule = models.CharField(max_length=20, choices=ACCESS_RULE, default="open")
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    published = models.BooleanField(default=False)
    responsible = models.ForeignKey(User, on_delete=models.PROTECT, related_name='courses_responsible')
    views_count = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['published', 'created_at'], name='idx_course_published'),
            models.Index(fields=['responsible', 'created_at'], name='idx_course_responsible'),
        ]

    def __str__(self):
        return self.title


class Lesson(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='lessons')
    title = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=LESSON_TYPE)
    description = models.TextField(blank=True)
    sort_order = models.IntegerField(default=0)
    # only for type == "quiz"
    quiz = models.ForeignKey("quizzes.Quiz", on_delete=models.SET_NULL, null=True, blank=True, related_name='lessons')
    video_url = models.URLField(max_length=500, blank=True)
    video_duration = models.IntegerField(null=True, blank=True, help_text="Seconds")
    file_url = models.URLField(max_length=500, blank=True)
    allow_download = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', 'id']
        indexes = [models.Index(fields=['course', 'sort_order'], name='idx_lesson_course_order')]

    def __str__(self):
        return f"{self.title} ({self.type})"


class CourseInvitation(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='invitations')
    email = models.EmailField()
    status = models.CharField(max_length=20, choices=INVITATION_STATUS, default="pending")
    invited_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='invitations_sent')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['course', 'email'], name='uq_invitation_course_email')
        ]
        indexes = [models.Index(fields=['email', 'status'], name='idx_invitation_email_status')]

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.email} -> {self.course_id} ({self.status})"
