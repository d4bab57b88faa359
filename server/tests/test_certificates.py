import re

import pytest
from rest_framework.exceptions import PermissionDenied

from certificates import services as cert_services
from certificates.models import Certificate
from certificates.services import issue_certificate, verify_certificate
from learning.services import set_lesson_progress
from utils.exceptions import CertificateNumberExhausted
from utils.gencode import generate_certificate_number

pytestmark = pytest.mark.django_db


@pytest.fixture
def completed_enrollment(learner, lessons, enrollment):
    for lesson in lessons:
        set_lesson_progress(learner, lesson, enrollment, "completed")
    enrollment.refresh_from_db()
    return enrollment


def test_number_format():
    assert re.fullmatch(r"CERT-[0-9A-Z]+-[0-9A-Z]{6}", generate_certificate_number())


class TestIssue:
    def test_requires_completed_enrollment(self, learner, course, enrollment):
        with pytest.raises(PermissionDenied):
            issue_certificate(learner, course, enrollment)
        assert not Certificate.objects.exists()

    def test_issue_is_idempotent(self, learner, course, completed_enrollment):
        first, created_first = issue_certificate(learner, course, completed_enrollment)
        second, created_second = issue_certificate(learner, course, completed_enrollment)

        assert created_first is True
        assert created_second is False
        assert first.certificate_number == second.certificate_number
        assert Certificate.objects.filter(user=learner, course=course).count() == 1

    def test_number_taken_at_insert_is_retried(self, learner, course, completed_enrollment, monkeypatch, other_learner):
        Certificate.objects.create(
            user=other_learner, course=course, enrollment=completed_enrollment,
            certificate_number="CERT-TAKEN-AAAAAA",
        )
        numbers = iter(["CERT-TAKEN-AAAAAA", "CERT-TAKEN-AAAAAA", "CERT-FREE-BBBBBB"])
        monkeypatch.setattr(cert_services, "generate_certificate_number", lambda: next(numbers))

        certificate, created = issue_certificate(learner, course, completed_enrollment)
        assert created
        assert certificate.certificate_number == "CERT-FREE-BBBBBB"
        assert Certificate.objects.count() == 2

    def test_exhausted_retries_raise(self, learner, course, completed_enrollment, monkeypatch, other_learner, settings):
        settings.CERTIFICATE_NUMBER_MAX_RETRIES = 3
        Certificate.objects.create(
            user=other_learner, course=course, enrollment=completed_enrollment,
            certificate_number="CERT-TAKEN-AAAAAA",
        )
        calls = []

        def taken():
            calls.append(1)
            return "CERT-TAKEN-AAAAAA"

        monkeypatch.setattr(cert_services, "generate_certificate_number", taken)

        with pytest.raises(CertificateNumberExhausted):
            issue_certificate(learner, course, completed_enrollment)
        assert len(calls) == 3
        assert not Certificate.objects.filter(user=learner).exists()

    def test_email_sent_on_creation(self, learner, course, completed_enrollment, mailoutbox, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            certificate, _ = issue_certificate(learner, course, completed_enrollment)
        assert len(mailoutbox) == 1
        assert certificate.certificate_number in mailoutbox[0].body
        assert mailoutbox[0].to == [learner.email]


class TestVerify:
    def test_lookup(self, learner, course, completed_enrollment):
        certificate, _ = issue_certificate(learner, course, completed_enrollment)
        assert verify_certificate(certificate.certificate_number) == certificate
        assert verify_certificate(f"  {certificate.certificate_number} ") == certificate
        assert verify_certificate("CERT-NOPE-000000") is None
        assert verify_certificate("") is None


class TestEndpoints:
    def test_post_issues_then_returns_existing(self, client_for, learner, course, completed_enrollment):
        client = client_for(learner)
        url = f"/api/courses/{course.id}/certificate/"
        first = client.post(url)
        second = client.post(url)
        assert first.status_code == 201
        assert second.status_code == 200
        assert first.data["certificate_number"] == second.data["certificate_number"]
        assert client.get(url).data["certificate_number"] == first.data["certificate_number"]

    def test_incomplete_course_is_forbidden(self, client_for, learner, course, enrollment):
        resp = client_for(learner).post(f"/api/courses/{course.id}/certificate/")
        assert resp.status_code == 403

    def test_not_enrolled_is_forbidden(self, client_for, other_learner, course):
        resp = client_for(other_learner).post(f"/api/courses/{course.id}/certificate/")
        assert resp.status_code == 403

    def test_get_without_certificate_is_404(self, client_for, learner, course, enrollment):
        resp = client_for(learner).get(f"/api/courses/{course.id}/certificate/")
        assert resp.status_code == 404

    def test_public_verification(self, api_client, learner, course, completed_enrollment):
        certificate, _ = issue_certificate(learner, course, completed_enrollment)
        resp = api_client.get(f"/api/certificates/{certificate.certificate_number}/")
        assert resp.status_code == 200
        assert resp.data["valid"] is True
        assert resp.data["certificate"]["holder_name"] == "Alice"
        assert resp.data["certificate"]["course_title"] == course.title

    def test_public_verification_unknown_number(self, api_client, db):
        resp = api_client.get("/api/certificates/CERT-NOPE-000000/")
        assert resp.status_code == 404
        assert resp.data["valid"] is False
        assert resp.data["certificate"] is None

    def test_public_verification_blank_number(self, api_client, db):
        resp = api_client.get("/api/certificates/%20/")
        assert resp.status_code == 400
