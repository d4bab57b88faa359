from rest_framework import serializers

from quizzes.models import Quiz, QuizAttempt, QuizOption, QuizQuestion


# ============ Authoring (instructor / superadmin) ============
class QuizOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuizOption
        fields = ("id", "question", "option_text", "is_correct", "sort_order")


class QuizQuestionSerializer(serializers.ModelSerializer):
    options = QuizOptionSerializer(many=True, read_only=True)

    class Meta:
        model = QuizQuestion
        fields = ("id", "quiz", "question_text", "sort_order", "options", "created_at")
        read_only_fields = ("created_at",)


class QuizSerializer(serializers.ModelSerializer):
    question_count = serializers.IntegerField(source="questions.count", read_only=True)

    class Meta:
        model = Quiz
        fields = (
            "id", "course", "title",
            "first_try_points", "second_try_points", "third_try_points", "fourth_plus_points",
            "question_count", "created_at", "updated_at",
        )
        read_only_fields = ("created_at", "updated_at")


# ============ Learner payloads ============
class LearnerOptionSerializer(serializers.ModelSerializer):
    """No is_correct: learners never see the key before answering."""
    class Meta:
        model = QuizOption
        fields = ("id", "option_text", "sort_order")
        read_only_fields = fields


class LearnerQuestionSerializer(serializers.ModelSerializer):
    options = LearnerOptionSerializer(many=True, read_only=True)

    class Meta:
        model = QuizQuestion
        fields = ("id", "question_text", "sort_order", "options")
        read_only_fields = fields


class LearnerQuizSerializer(serializers.ModelSerializer):
    questions = LearnerQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Quiz
        fields = (
            "id", "course", "title",
            "first_try_points", "second_try_points", "third_try_points", "fourth_plus_points",
            "questions",
        )
        read_only_fields = fields


class QuizSubmitIn(serializers.Serializer):
    # {question_id: option_id}; per-question checks happen in the grader
    answers = serializers.DictField(child=serializers.JSONField())


class QuizAttemptSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuizAttempt
        fields = ("id", "quiz", "attempt_number", "score", "points_earned", "started_at", "completed_at")
        read_only_fields = fields


class QuestionResultSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    selected_option_id = serializers.IntegerField()
    is_correct = serializers.BooleanField()
    correct_option_ids = serializers.ListField(child=serializers.IntegerField())


class AttemptSummarySerializer(serializers.Serializer):
    total_questions = serializers.IntegerField()
    correct_answers = serializers.IntegerField()
    score_percent = serializers.IntegerField()
    points_earned = serializers.IntegerField()
    is_first_perfect = serializers.BooleanField()


class AttemptResultSerializer(serializers.Serializer):
    attempt = QuizAttemptSerializer()
    summary = AttemptSummarySerializer()
    results = QuestionResultSerializer(many=True)


class HistorySummarySerializer(serializers.Serializer):
    total_attempts = serializers.IntegerField()
    best_score = serializers.IntegerField()
    total_points_earned = serializers.IntegerField()
    has_perfect_score = serializers.BooleanField()


class AttemptHistorySerializer(serializers.Serializer):
    attempts = QuizAttemptSerializer(many=True)
    summary = HistorySummarySerializer()
