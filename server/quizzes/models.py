from django.db import models
from users.models import User
from courses.models import Course


class Quiz(models.Model):
    """
    Points are awarded once per learner, on the first perfect attempt,
    by tier: 1st try, 2nd try, 3rd try, 4th and later.
    """
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='quizzes')
    title = models.CharField(max_length=255)
    first_try_points  = models.PositiveIntegerField(default=10)
    second_try_points = models.PositiveIntegerField(default=7)
    third_try_points  = models.PositiveIntegerField(default=5)
    fourth_plus_points = models.PositiveIntegerField(default=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']
        verbose_name_plural = "quizzes"

    def __str__(self):
        return self.title

    def points_for_attempt(self, attempt_number: int) -> int:
        if attempt_number <= 1:
            return self.first_try_points
        if attempt_number == 2:
            return self.second_try_points
        if attempt_number == 3:
            return self.third_try_points
        return self.fourth_plus_points


class QuizQuestion(models.Model):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name='questions')
    question_text = models.TextField()
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sort_order', 'id']

    def __str__(self):
        return f"Question({self.id}) for Quiz({self.quiz_id})"


class QuizOption(models.Model):
    question = models.ForeignKey(QuizQuestion, on_delete=models.CASCADE, related_name='options')
    option_text = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ['sort_order', 'id']

    def __str__(self):
        return f"Option({self.option_text[:20]}) for Question({self.question_id})"


class QuizAttempt(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='quiz_attempts')
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name='attempts')
    attempt_number = models.PositiveIntegerField()
    score = models.PositiveSmallIntegerField()          # 0-100
    points_earned = models.PositiveIntegerField(default=0)
    started_at = models.DateTimeField()
    completed_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'quiz', 'attempt_number'], name='uq_quizattempt_user_quiz_number'),
        ]
        indexes = [
            models.Index(fields=['user', 'quiz', 'score'], name='idx_attempt_user_quiz_score'),
        ]
        ordering = ['-attempt_number']

    def __str__(self):
        return f"{self.user.username} · Quiz({self.quiz_id}) #{self.attempt_number} = {self.score}%"


class QuizResponse(models.Model):
    """Answer snapshot, written once at submission."""
    attempt = models.ForeignKey(QuizAttempt, on_delete=models.CASCADE, related_name='responses')
    question = models.ForeignKey(QuizQuestion, on_delete=models.CASCADE, related_name='responses')
    selected_option = models.ForeignKey(QuizOption, on_delete=models.CASCADE, related_name='responses')
    is_correct = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['attempt', 'question'], name='uq_quizresponse_attempt_question')
        ]
