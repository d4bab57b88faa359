import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Max, Sum
from django.utils import timezone
from rest_framework import serializers

from progress.services import award_points
from quizzes.models import QuizAttempt, QuizResponse
from users.models import User

logger = logging.getLogger(__name__)

PERFECT_SCORE = 100


def compute_score(correct: int, total: int) -> int:
    """round(100 * correct / total), halves rounded up, 0-100."""
    if total <= 0:
        raise ValueError("total must be positive")
    ratio = Decimal(100 * correct) / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _load_questions(quiz):
    return list(quiz.questions.prefetch_related("options").order_by("sort_order", "id"))


def validate_answers(questions, answers):
    """
    Pair every question with exactly one of its own options.
    Raises ValidationError naming the first offending question; nothing is written.
    """
    if not questions:
        raise serializers.ValidationError({"quiz": "This quiz has no questions."})
    if not isinstance(answers, dict):
        raise serializers.ValidationError(
            {"answers": "Answers must be an object mapping question id to option id."}
        )

    by_key = {str(k): v for k, v in answers.items()}
    selections = []
    for question in questions:
        raw = by_key.get(str(question.id))
        if raw is None or raw == "":
            raise serializers.ValidationError(
                {"answers": f"Missing answer for question {question.id}."}
            )
        if isinstance(raw, (list, tuple, dict, bool)):
            raise serializers.ValidationError(
                {"answers": f"Exactly one option must be selected for question {question.id}."}
            )
        option = next((o for o in question.options.all() if str(o.id) == str(raw)), None)
        if option is None:
            raise serializers.ValidationError(
                {"answers": f"Invalid option selected for question {question.id}."}
            )
        selections.append((question, option))
    return selections


def submit_attempt(user, quiz, answers):
    """
    Grade a submission and persist it as one attempt plus one response per question.

    Points are granted only for a perfect score and only if no earlier attempt of
    this user on this quiz was already perfect; the amount follows the attempt tier.
    The user row is locked for the duration so concurrent submissions of the same
    learner see each other's attempts (attempt numbering and first-perfect check).
    """
    questions = _load_questions(quiz)
    selections = validate_answers(questions, answers)

    graded = [(q, opt, bool(opt.is_correct)) for q, opt in selections]
    correct_count = sum(1 for _, _, ok in graded if ok)
    score = compute_score(correct_count, len(graded))
    now = timezone.now()

    with transaction.atomic():
        User.objects.select_for_update().only("id").get(pk=user.pk)

        prior = QuizAttempt.objects.filter(user=user, quiz=quiz)
        attempt_number = prior.count() + 1
        already_perfect = prior.filter(score=PERFECT_SCORE).exists()

        points = 0
        if score == PERFECT_SCORE and not already_perfect:
            points = quiz.points_for_attempt(attempt_number)

        attempt = QuizAttempt.objects.create(
            user=user,
            quiz=quiz,
            attempt_number=attempt_number,
            score=score,
            points_earned=points,
            started_at=now,
            completed_at=now,
        )
        QuizResponse.objects.bulk_create([
            QuizResponse(attempt=attempt, question=q, selected_option=opt, is_correct=ok)
            for q, opt, ok in graded
        ])

        if points > 0:
            award_points(user, points)

    logger.info(
        "Quiz %s attempt #%s by user=%s: score=%s points=%s",
        quiz.pk, attempt_number, user.pk, score, points,
    )

    # correct options are revealed only for questions answered correctly
    results = []
    for q, opt, ok in graded:
        correct_ids = [o.id for o in q.options.all() if o.is_correct] if ok else []
        results.append({
            "question_id": q.id,
            "selected_option_id": opt.id,
            "is_correct": ok,
            "correct_option_ids": correct_ids,
        })

    return {
        "attempt": attempt,
        "summary": {
            "total_questions": len(graded),
            "correct_answers": correct_count,
            "score_percent": score,
            "points_earned": points,
            "is_first_perfect": score == PERFECT_SCORE and points > 0,
        },
        "results": results,
    }


def attempt_history(user, quiz):
    attempts = QuizAttempt.objects.filter(user=user, quiz=quiz).order_by("-attempt_number")
    agg = attempts.aggregate(best=Max("score"), points=Sum("points_earned"))
    return {
        "attempts": list(attempts),
        "summary": {
            "total_attempts": attempts.count(),
            "best_score": agg["best"] or 0,
            "total_points_earned": agg["points"] or 0,
            "has_perfect_score": attempts.filter(score=PERFECT_SCORE).exists(),
        },
    }
