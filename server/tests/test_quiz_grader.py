import pytest
from rest_framework.exceptions import ValidationError

from quizzes.models import Quiz, QuizAttempt, QuizOption, QuizQuestion, QuizResponse
from quizzes.services import attempt_history, compute_score, submit_attempt


class TestScore:
    @pytest.mark.parametrize("correct,total,expected", [
        (3, 4, 75),
        (0, 4, 0),
        (4, 4, 100),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (5, 8, 63),
    ])
    def test_rounds_half_up(self, correct, total, expected):
        assert compute_score(correct, total) == expected

    def test_empty_total_is_rejected(self):
        with pytest.raises(ValueError):
            compute_score(0, 0)


@pytest.mark.django_db
class TestSubmitAttempt:
    def test_three_of_four_scores_75_without_points(self, learner, quiz, build_answers):
        result = submit_attempt(learner, quiz, build_answers(quiz, wrong=1))
        assert result["summary"]["score_percent"] == 75
        assert result["summary"]["correct_answers"] == 3
        assert result["summary"]["total_questions"] == 4
        assert result["summary"]["points_earned"] == 0
        learner.refresh_from_db()
        assert learner.total_points == 0

    def test_first_perfect_attempt_earns_first_try_points(self, learner, quiz, build_answers):
        result = submit_attempt(learner, quiz, build_answers(quiz))
        assert result["attempt"].attempt_number == 1
        assert result["summary"]["points_earned"] == 10
        assert result["summary"]["is_first_perfect"] is True
        learner.refresh_from_db()
        assert learner.total_points == 10

    def test_second_perfect_attempt_earns_nothing(self, learner, quiz, build_answers):
        submit_attempt(learner, quiz, build_answers(quiz))
        second = submit_attempt(learner, quiz, build_answers(quiz))
        assert second["attempt"].attempt_number == 2
        assert second["summary"]["points_earned"] == 0
        assert second["summary"]["is_first_perfect"] is False
        learner.refresh_from_db()
        assert learner.total_points == 10

    def test_attempt_numbers_are_sequential(self, learner, quiz, build_answers):
        numbers = [
            submit_attempt(learner, quiz, build_answers(quiz, wrong=w))["attempt"].attempt_number
            for w in (2, 1, 3)
        ]
        assert numbers == [1, 2, 3]

    @pytest.mark.parametrize("misses,expected", [(1, 7), (2, 5), (3, 2), (5, 2)])
    def test_points_follow_attempt_tier(self, learner, quiz, build_answers, misses, expected):
        for _ in range(misses):
            submit_attempt(learner, quiz, build_answers(quiz, wrong=1))
        result = submit_attempt(learner, quiz, build_answers(quiz))
        assert result["summary"]["points_earned"] == expected

    def test_attempt_numbers_are_per_user(self, learner, other_learner, quiz, build_answers):
        submit_attempt(learner, quiz, build_answers(quiz, wrong=1))
        result = submit_attempt(other_learner, quiz, build_answers(quiz))
        assert result["attempt"].attempt_number == 1
        assert result["summary"]["points_earned"] == 10

    def test_responses_are_stored(self, learner, quiz, build_answers):
        result = submit_attempt(learner, quiz, build_answers(quiz, wrong=2))
        responses = QuizResponse.objects.filter(attempt=result["attempt"])
        assert responses.count() == 4
        assert responses.filter(is_correct=True).count() == 2

    def test_wrong_answers_reveal_no_correct_option(self, learner, quiz, build_answers):
        result = submit_attempt(learner, quiz, build_answers(quiz, wrong=2))
        wrong = [r for r in result["results"] if not r["is_correct"]]
        right = [r for r in result["results"] if r["is_correct"]]
        assert len(wrong) == 2
        assert all(r["correct_option_ids"] == [] for r in wrong)
        assert all(r["correct_option_ids"] == [r["selected_option_id"]] for r in right)


@pytest.mark.django_db
class TestValidation:
    def test_missing_answer_names_the_question(self, learner, quiz, build_answers):
        answers = build_answers(quiz)
        dropped = next(iter(answers))
        del answers[dropped]
        with pytest.raises(ValidationError) as exc:
            submit_attempt(learner, quiz, answers)
        assert dropped in str(exc.value.detail)
        assert not QuizAttempt.objects.exists()

    def test_option_from_another_question_is_rejected(self, learner, quiz, build_answers):
        answers = build_answers(quiz)
        first, second = list(quiz.questions.order_by("sort_order"))[:2]
        answers[str(first.id)] = second.options.first().id
        with pytest.raises(ValidationError) as exc:
            submit_attempt(learner, quiz, answers)
        assert str(first.id) in str(exc.value.detail)
        assert not QuizAttempt.objects.exists()

    def test_several_options_for_one_question_are_rejected(self, learner, quiz, build_answers):
        answers = build_answers(quiz)
        question = quiz.questions.first()
        answers[str(question.id)] = list(question.options.values_list("id", flat=True))
        with pytest.raises(ValidationError):
            submit_attempt(learner, quiz, answers)

    def test_quiz_without_questions_is_rejected(self, learner, course):
        empty = Quiz.objects.create(course=course, title="Empty")
        with pytest.raises(ValidationError):
            submit_attempt(learner, empty, {})


@pytest.mark.django_db
class TestAttemptHistory:
    def test_summary_and_order(self, learner, quiz, build_answers):
        submit_attempt(learner, quiz, build_answers(quiz, wrong=1))
        submit_attempt(learner, quiz, build_answers(quiz))
        submit_attempt(learner, quiz, build_answers(quiz))

        history = attempt_history(learner, quiz)
        assert [a.attempt_number for a in history["attempts"]] == [3, 2, 1]
        assert history["summary"] == {
            "total_attempts": 3,
            "best_score": 100,
            "total_points_earned": 7,
            "has_perfect_score": True,
        }

    def test_empty_history(self, learner, quiz):
        history = attempt_history(learner, quiz)
        assert history["attempts"] == []
        assert history["summary"]["best_score"] == 0
        assert history["summary"]["has_perfect_score"] is False


@pytest.mark.django_db
class TestQuizEndpoints:
    def base(self, course, quiz):
        return f"/api/courses/{course.id}/quizzes/{quiz.id}/"

    def test_quiz_payload_hides_correct_flags(self, client_for, learner, course, quiz, enrollment):
        resp = client_for(learner).get(self.base(course, quiz))
        assert resp.status_code == 200
        assert len(resp.data["questions"]) == 4
        for question in resp.data["questions"]:
            for option in question["options"]:
                assert "is_correct" not in option

    def test_submit_returns_201(self, client_for, learner, course, quiz, enrollment, build_answers):
        resp = client_for(learner).post(
            self.base(course, quiz) + "attempt/", {"answers": build_answers(quiz)}, format="json"
        )
        assert resp.status_code == 201
        assert resp.data["summary"]["score_percent"] == 100
        assert resp.data["attempt"]["points_earned"] == 10

    def test_wrong_answer_payload_has_no_correct_ids(self, client_for, learner, course, quiz, enrollment, build_answers):
        resp = client_for(learner).post(
            self.base(course, quiz) + "attempt/", {"answers": build_answers(quiz, wrong=4)}, format="json"
        )
        assert resp.status_code == 201
        correct_ids = set(QuizOption.objects.filter(question__quiz=quiz, is_correct=True).values_list("id", flat=True))
        for row in resp.data["results"]:
            assert not correct_ids & set(row["correct_option_ids"])

    def test_not_enrolled_is_forbidden(self, client_for, other_learner, course, quiz, build_answers):
        resp = client_for(other_learner).post(
            self.base(course, quiz) + "attempt/", {"answers": build_answers(quiz)}, format="json"
        )
        assert resp.status_code == 403
        assert not QuizAttempt.objects.exists()

    def test_invalid_answers_are_400(self, client_for, learner, course, quiz, enrollment):
        resp = client_for(learner).post(self.base(course, quiz) + "attempt/", {"answers": {}}, format="json")
        assert resp.status_code == 400

    def test_history_endpoint(self, client_for, learner, course, quiz, enrollment, build_answers):
        client = client_for(learner)
        client.post(self.base(course, quiz) + "attempt/", {"answers": build_answers(quiz)}, format="json")
        resp = client.get(self.base(course, quiz) + "attempts/")
        assert resp.status_code == 200
        assert resp.data["summary"]["total_attempts"] == 1
        assert resp.data["attempts"][0]["attempt_number"] == 1

    def test_quiz_of_other_course_is_not_found(self, client_for, learner, course, enrollment, instructor):
        from courses.models import Course
        other = Course.objects.create(title="Other", published=True, responsible=instructor)
        foreign = Quiz.objects.create(course=other, title="Foreign")
        QuizQuestion.objects.create(quiz=foreign, question_text="?")
        resp = client_for(learner).get(self.base(course, foreign))
        assert resp.status_code == 404
