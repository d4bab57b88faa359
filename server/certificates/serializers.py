from rest_framework import serializers

from certificates.models import Certificate


class CertificateSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)

    class Meta:
        model = Certificate
        fields = ("id", "certificate_number", "course", "course_title", "user", "enrollment", "issued_at")
        read_only_fields = fields


class PublicCertificateSerializer(serializers.ModelSerializer):
    """What anyone holding the number may see."""
    holder_name = serializers.CharField(source="user.name", read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)

    class Meta:
        model = Certificate
        fields = ("certificate_number", "holder_name", "course_title", "issued_at")
        read_only_fields = fields
