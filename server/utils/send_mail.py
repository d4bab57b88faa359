from django.conf import settings
from django.core.mail import send_mail

from utils.email import EMAIL_MESSAGE_TEMPLATES


def _render(template_key, **context):
    template = EMAIL_MESSAGE_TEMPLATES.get(template_key)
    if not template:
        raise ValueError(f"Unknown email template: {template_key}")
    return template.format(**context)


def send_user_email(user, template_key, subject, **context):
    if not getattr(user, "email", None):
        return

    base_ctx = {
        "username": getattr(user, "name", "") or getattr(user, "username", "") or user.email,
    }
    base_ctx.update(context or {})

    send_mail(
        subject=subject,
        message=_render(template_key, **base_ctx),
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
        recipient_list=[user.email],
        fail_silently=False,
    )


def send_address_email(email, template_key, subject, **context):
    """Same as send_user_email for an address that may not have an account yet."""
    if not email:
        return

    send_mail(
        subject=subject,
        message=_render(template_key, **context),
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
        recipient_list=[email],
        fail_silently=False,
    )
