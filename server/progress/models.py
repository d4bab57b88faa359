from django.db import models


class BadgeLevel(models.Model):
    """
    A points threshold. A learner holds the highest level whose
    `min_points` does not exceed their `total_points`.
    """
    name = models.CharField(max_length=100)
    min_points = models.PositiveIntegerField(default=0)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sort_order', 'min_points', 'id']
        indexes = [models.Index(fields=['min_points'], name='idx_badge_min_points')]

    def __str__(self):
        return f"{self.name} ({self.min_points}+)"
