import hashlib
import hmac
import logging

from django.conf import settings
from django.db import transaction
from rest_framework import serializers

from learning.models import Enrollment
from learning.services import enroll_user
from payments.models import Payment
from utils.exceptions import PaymentGatewayNotConfigured
from utils.gencode import generate_order_id
from utils.send_mail import send_user_email

logger = logging.getLogger(__name__)


def _gateway_secret():
    secret = getattr(settings, "PAYMENT_GATEWAY_SECRET", "")
    if not secret:
        raise PaymentGatewayNotConfigured()
    return secret


def expected_signature(order_id, payment_id, secret):
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def create_order(user, course):
    """
    Returns (payment, enrollment). Exactly one of them is set:
    an enrolled user gets their enrollment back and no payment is created.
    """
    enrollment = Enrollment.objects.filter(user=user, course=course).first()
    if enrollment:
        return None, enrollment

    if course.access_rule != "payment":
        raise serializers.ValidationError({"course": "This course does not require payment."})
    if not course.price or course.price <= 0:
        raise serializers.ValidationError({"course": "This course has no valid price."})

    _gateway_secret()

    payment = Payment.objects.create(
        user=user,
        course=course,
        amount=course.price,
        currency=getattr(settings, "PAYMENT_CURRENCY", "INR"),
        gateway_order_id=generate_order_id(),
        status="pending",
    )
    logger.info("Created payment order %s for user=%s course=%s", payment.gateway_order_id, user.pk, course.pk)
    return payment, None


def _notify_enrolled(enrollment):
    try:
        send_user_email(
            enrollment.user,
            "enrollment_confirmed",
            "Enrollment confirmed",
            course_title=enrollment.course.title,
        )
    except Exception:
        logger.exception("Enrollment email failed for enrollment=%s", enrollment.pk)


def verify_payment(payment, order_id, payment_id, signature):
    """
    Check the gateway signature and enroll on success.
    Returns (payment, enrollment, newly_completed).
    A bad signature marks the payment failed and raises ValidationError.
    """
    secret = _gateway_secret()
    if payment.gateway_order_id != order_id:
        raise serializers.ValidationError({"gateway_order_id": "Order id does not match this payment."})

    with transaction.atomic():
        payment = Payment.objects.select_for_update().select_related("user", "course").get(pk=payment.pk)

        if payment.status == "completed":
            enrollment, _ = enroll_user(payment.user, payment.course)
            return payment, enrollment, False

        valid = hmac.compare_digest(expected_signature(order_id, payment_id, secret), signature or "")
        payment.gateway_payment_id = payment_id
        payment.gateway_signature = signature
        payment.status = "completed" if valid else "failed"
        payment.save(update_fields=["gateway_payment_id", "gateway_signature", "status", "updated_at"])

        enrollment = None
        if valid:
            enrollment, created = enroll_user(payment.user, payment.course)
            if created:
                transaction.on_commit(lambda: _notify_enrolled(enrollment))

    if not valid:
        logger.warning("Payment signature mismatch for order %s (user=%s)", order_id, payment.user_id)
        raise serializers.ValidationError({"gateway_signature": "Payment verification failed."})

    logger.info("Payment %s completed, user=%s enrolled in course=%s", order_id, payment.user_id, payment.course_id)
    return payment, enrollment, True
