import pytest
from rest_framework.test import APIClient

from courses.models import Course, Lesson
from learning.services import enroll_user
from progress.models import BadgeLevel
from quizzes.models import Quiz, QuizOption, QuizQuestion
from users.models import User
from utils._enum import Role


def make_user(username, role=Role.LEARNER, **extra):
    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create_user(username=username, password="pass-1234-word", role=role, **extra)


@pytest.fixture
def learner(db):
    return make_user("alice", name="Alice")


@pytest.fixture
def other_learner(db):
    return make_user("bob", name="Bob")


@pytest.fixture
def instructor(db):
    return make_user("ivan", role=Role.INSTRUCTOR, name="Ivan")


@pytest.fixture
def superadmin(db):
    return make_user("root", role=Role.SUPERADMIN, name="Root")


@pytest.fixture
def course(instructor):
    course = Course.objects.create(
        title="Intro to Testing",
        description="Basics",
        published=True,
        access_rule="open",
        responsible=instructor,
    )
    for i, kind in enumerate(["video", "document", "image"], start=1):
        Lesson.objects.create(course=course, title=f"Lesson {i}", type=kind, sort_order=i)
    return course


@pytest.fixture
def lessons(course):
    return list(course.lessons.order_by("sort_order"))


@pytest.fixture
def enrollment(learner, course):
    enrollment, _ = enroll_user(learner, course)
    return enrollment


@pytest.fixture
def quiz(course):
    """Four questions, two options each; the first option is the correct one."""
    quiz = Quiz.objects.create(course=course, title="Checkpoint")
    for q in range(1, 5):
        question = QuizQuestion.objects.create(quiz=quiz, question_text=f"Question {q}?", sort_order=q)
        QuizOption.objects.create(question=question, option_text="right", is_correct=True, sort_order=1)
        QuizOption.objects.create(question=question, option_text="wrong", is_correct=False, sort_order=2)
    return quiz


def answers_for(quiz, wrong=0):
    """{question_id: option_id} with the first `wrong` questions answered incorrectly."""
    answers = {}
    for i, question in enumerate(quiz.questions.order_by("sort_order", "id")):
        correct = i >= wrong
        option = question.options.get(is_correct=correct)
        answers[str(question.id)] = option.id
    return answers


@pytest.fixture
def badges(db):
    return [
        BadgeLevel.objects.create(name="Bronze", min_points=0, sort_order=1),
        BadgeLevel.objects.create(name="Silver", min_points=100, sort_order=2),
        BadgeLevel.objects.create(name="Gold", min_points=500, sort_order=3),
    ]


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _login(user):
        api_client.force_authenticate(user=user)
        return api_client
    return _login


@pytest.fixture
def build_answers():
    return answers_for


@pytest.fixture
def user_factory(db):
    return make_user
