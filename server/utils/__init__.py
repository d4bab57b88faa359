from ._enum import Role, ProgressStatus, VISIBILITY, ACCESS_RULE, LESSON_TYPE, INVITATION_STATUS, PAYMENT_STATUS
from .email import EMAIL_MESSAGE_TEMPLATES
