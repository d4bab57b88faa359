import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from certificates.models import Certificate
from utils.exceptions import CertificateNumberExhausted
from utils.gencode import generate_certificate_number
from utils.send_mail import send_user_email

logger = logging.getLogger(__name__)


def _notify_issued(certificate):
    try:
        send_user_email(
            certificate.user,
            "certificate_issued",
            "Your certificate is ready",
            course_title=certificate.course.title,
            certificate_number=certificate.certificate_number,
        )
    except Exception:
        logger.exception("Certificate email failed for certificate=%s", certificate.pk)


def issue_certificate(user, course, enrollment):
    """
    Return (certificate, created).
    An existing certificate is returned unchanged; otherwise one is minted for a
    completed enrollment. A concurrent issue for the same pair resolves to the stored row.
    """
    if enrollment.user_id != user.pk or enrollment.course_id != course.pk:
        raise ValueError("Enrollment does not belong to this user and course.")

    existing = Certificate.objects.filter(user=user, course=course).first()
    if existing:
        return existing, False

    if not enrollment.is_completed:
        raise PermissionDenied("Complete every lesson of the course to receive a certificate.")

    retries = getattr(settings, "CERTIFICATE_NUMBER_MAX_RETRIES", 5)
    for _ in range(retries):
        number = generate_certificate_number()
        try:
            with transaction.atomic():
                certificate = Certificate.objects.create(
                    user=user,
                    course=course,
                    enrollment=enrollment,
                    certificate_number=number,
                    issued_at=timezone.now(),
                )
            break
        except IntegrityError:
            existing = Certificate.objects.filter(user=user, course=course).first()
            if existing is not None:
                return existing, False
            # number already taken by another certificate
            logger.warning("Certificate number %s collided, retrying", number)
    else:
        logger.error("No free certificate number after %s tries", retries)
        raise CertificateNumberExhausted()

    logger.info("Issued certificate %s to user=%s course=%s", number, user.pk, course.pk)
    transaction.on_commit(lambda: _notify_issued(certificate))
    return certificate, True


def verify_certificate(number):
    number = (number or "").strip()
    if not number:
        return None
    return (
        Certificate.objects
        .select_related("user", "course")
        .filter(certificate_number=number)
        .first()
    )
