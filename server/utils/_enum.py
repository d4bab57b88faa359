from django.db import models


class Role(models.TextChoices):
    SUPERADMIN = "superadmin", "Super Admin"
    INSTRUCTOR = "instructor", "Instructor"
    LEARNER    = "learner",    "Learner"


class ProgressStatus(models.TextChoices):
    """Shared by Enrollment and LessonProgress."""
    NOT_STARTED = "not_started", "Not Started"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED   = "completed",   "Completed"


VISIBILITY = [
        ("everyone", "Everyone"),
        ("signed_in", "Signed In"),
    ]

ACCESS_RULE = [
        ("open", "Open"),
        ("invitation", "On Invitation"),
        ("payment", "On Payment"),
    ]

LESSON_TYPE = [
    ("video",    "Video"),
    ("document", "Document"),
    ("image",    "Image"),
    ("quiz",     "Quiz"),
]

INVITATION_STATUS = [
        ("pending", "Pending"),
        ("accepted", "Accepted"),
    ]

PAYMENT_STATUS = [
        ("pending", "Pending"),
        ("completed", "Completed"),
        ("failed", "Failed"),
    ]
