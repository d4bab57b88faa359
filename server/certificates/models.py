from django.db import models
from django.utils import timezone

from courses.models import Course
from learning.models import Enrollment
from users.models import User


class Certificate(models.Model):
    """Issued once per (user, course) after the enrollment is completed. Never updated."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='certificates')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='certificates')
    enrollment = models.ForeignKey(Enrollment, on_delete=models.CASCADE, related_name='certificates')
    certificate_number = models.CharField(max_length=64, unique=True)
    issued_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'course'], name='uq_certificate_user_course')
        ]
        ordering = ['-issued_at']

    def __str__(self):
        return self.certificate_number
