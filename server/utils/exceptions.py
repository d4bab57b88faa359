from rest_framework import status
from rest_framework.exceptions import APIException


class CertificateNumberExhausted(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Could not generate a unique certificate number."
    default_code = "certificate_number_exhausted"


class PaymentGatewayNotConfigured(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Payment gateway is not configured. Please contact the administrator."
    default_code = "payment_gateway_not_configured"


class PaymentRequired(APIException):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "This course requires payment before enrollment."
    default_code = "payment_required"
