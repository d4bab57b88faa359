from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from courses.views import CourseAuthoringMixin, managed_queryset
from learning.services import get_published_course, require_enrollment
from quizzes.models import Quiz, QuizOption, QuizQuestion
from quizzes.serializers import (
    AttemptHistorySerializer, AttemptResultSerializer, LearnerQuizSerializer,
    QuizOptionSerializer, QuizQuestionSerializer, QuizSerializer, QuizSubmitIn,
)
from quizzes.services import attempt_history, submit_attempt


class QuizViewSet(CourseAuthoringMixin, viewsets.ModelViewSet):
    serializer_class = QuizSerializer

    def get_queryset(self):
        qs = Quiz.objects.select_related("course").order_by("id")
        course_id = self.request.query_params.get("course")
        if course_id:
            qs = qs.filter(course_id=course_id)
        return managed_queryset(qs, self.request.user, "course")

    def course_for(self, serializer):
        return serializer.validated_data.get("course") or serializer.instance.course


class QuizQuestionViewSet(CourseAuthoringMixin, viewsets.ModelViewSet):
    serializer_class = QuizQuestionSerializer

    def get_queryset(self):
        qs = QuizQuestion.objects.select_related("quiz__course").prefetch_related("options")
        quiz_id = self.request.query_params.get("quiz")
        if quiz_id:
            qs = qs.filter(quiz_id=quiz_id)
        return managed_queryset(qs, self.request.user, "quiz__course")

    def course_for(self, serializer):
        quiz = serializer.validated_data.get("quiz") or serializer.instance.quiz
        return quiz.course


class QuizOptionViewSet(CourseAuthoringMixin, viewsets.ModelViewSet):
    serializer_class = QuizOptionSerializer

    def get_queryset(self):
        qs = QuizOption.objects.select_related("question__quiz__course")
        question_id = self.request.query_params.get("question")
        if question_id:
            qs = qs.filter(question_id=question_id)
        return managed_queryset(qs, self.request.user, "question__quiz__course")

    def course_for(self, serializer):
        question = serializer.validated_data.get("question") or serializer.instance.question
        return question.quiz.course


# ============ Learner endpoints ============
def _enrolled_quiz(request, course_pk, quiz_pk, message):
    course = get_published_course(course_pk, request.user)
    require_enrollment(request.user, course, message)
    return get_object_or_404(Quiz, pk=quiz_pk, course=course)


class LearnerQuizView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: LearnerQuizSerializer})
    def get(self, request, course_pk, quiz_pk):
        quiz = _enrolled_quiz(request, course_pk, quiz_pk, "You must be enrolled in this course to take quizzes.")
        quiz = Quiz.objects.prefetch_related("questions__options").get(pk=quiz.pk)
        return Response(LearnerQuizSerializer(quiz).data)


class QuizAttemptView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=QuizSubmitIn, responses={201: AttemptResultSerializer})
    def post(self, request, course_pk, quiz_pk):
        quiz = _enrolled_quiz(request, course_pk, quiz_pk, "You must be enrolled in this course to take quizzes.")
        ser = QuizSubmitIn(data=request.data)
        ser.is_valid(raise_exception=True)

        result = submit_attempt(request.user, quiz, ser.validated_data["answers"])
        return Response(AttemptResultSerializer(result).data, status=status.HTTP_201_CREATED)


class QuizAttemptHistoryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: AttemptHistorySerializer})
    def get(self, request, course_pk, quiz_pk):
        quiz = _enrolled_quiz(request, course_pk, quiz_pk, "You must be enrolled in this course to view attempts.")
        return Response(AttemptHistorySerializer(attempt_history(request.user, quiz)).data)
