from django.db import models

from django.contrib.auth.models import AbstractUser
from utils._enum import Role


class User(AbstractUser):
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.LEARNER)
    avatar = models.URLField(blank=True, null=True)
    # only ever increased, through progress.services.award_points
    total_points = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['-total_points', 'name'], name='idx_user_points_name')]

    def save(self, *args, **kwargs):
        if not self.name:
            self.name = self.get_full_name() or self.username
        super().save(*args, **kwargs)
