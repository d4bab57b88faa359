
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from certificates.models import Certificate
from certificates.serializers import CertificateSerializer, PublicCertificateSerializer
from certificates.services import issue_certificate, verify_certificate
from learning.services import get_published_course, require_enrollment


class CourseCertificateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: CertificateSerializer})
    def get(self, request, course_pk):
        course = get_published_course(course_pk, request.user)
        certificate = Certificate.objects.filter(user=request.user, course=course).first()
        if certificate is None:
            return Response({"detail": "No certificate issued for this course."}, status=status.HTTP_404_NOT_FOUND)
        return Response(CertificateSerializer(certificate).data)

    @extend_schema(request=None, responses={200: CertificateSerializer, 201: CertificateSerializer})
    def post(self, request, course_pk):
        course = get_published_course(course_pk, request.user)
        enrollment = require_enrollment(
            request.user, course, "You must be enrolled in this course to receive a certificate."
        )
        certificate, created = issue_certificate(request.user, course, enrollment)
        return Response(
            CertificateSerializer(certificate).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

class VerifyCertificateView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @extend_schema(responses={200: dict, 404: dict})
    def get(self, request, number):
        if not (number or "").strip():
            return Response({"detail": "Certificate number is required."}, status=status.HTTP_400_BAD_REQUEST)

        certificate = verify_certificate(number)
        if certificate is None:
            return Response(
                {"valid": False, "certificate": None, "detail": "Certificate not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({"valid": True, "certificate": PublicCertificateSerializer(certificate).data})
