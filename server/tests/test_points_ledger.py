import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator

from progress.consumers import LeaderboardConsumer
from progress.services import (
    LEADERBOARD_GROUP, award_points, badge_progress, current_badge,
    leaderboard, next_badge, ordered_badges, points_summary,
)

pytestmark = pytest.mark.django_db


class TestBadgeTiers:
    def test_silver_at_150(self, badges):
        ordered = ordered_badges()
        cur = current_badge(150, ordered)
        nxt = next_badge(cur, ordered)
        progress = badge_progress(150, cur, nxt)

        assert cur.name == "Silver"
        assert nxt.name == "Gold"
        assert progress["points_needed"] == 350
        assert progress["progress_percent"] == 13  # 50 of 400

    def test_exact_threshold_reaches_badge(self, badges):
        assert current_badge(500, ordered_badges()).name == "Gold"
        assert current_badge(499, ordered_badges()).name == "Silver"

    def test_top_badge_has_no_next(self, badges):
        ordered = ordered_badges()
        cur = current_badge(9000, ordered)
        assert next_badge(cur, ordered) is None
        assert badge_progress(9000, cur, None) is None

    def test_no_qualifying_badge(self, db):
        from progress.models import BadgeLevel
        BadgeLevel.objects.create(name="Starter", min_points=50, sort_order=1)
        ordered = ordered_badges()
        assert current_badge(20, ordered) is None
        nxt = next_badge(None, ordered)
        assert nxt.name == "Starter"
        assert badge_progress(20, None, nxt) == {"badge": nxt, "points_needed": 30, "progress_percent": 40}

    def test_progress_is_clamped(self, badges):
        ordered = ordered_badges()
        silver, gold = ordered[1], ordered[2]
        assert badge_progress(900, silver, gold)["progress_percent"] == 100
        assert badge_progress(900, silver, gold)["points_needed"] == 0
        assert badge_progress(10, silver, gold)["progress_percent"] == 0


class TestAwardPoints:
    def test_adds_to_total(self, learner):
        assert award_points(learner, 10) == 10
        assert award_points(learner, 5) == 15
        learner.refresh_from_db()
        assert learner.total_points == 15

    @pytest.mark.parametrize("amount", [0, -3])
    def test_non_positive_is_ignored(self, learner, amount):
        award_points(learner, amount)
        learner.refresh_from_db()
        assert learner.total_points == 0

    def test_broadcasts_after_commit(self, learner, django_capture_on_commit_callbacks):
        layer = get_channel_layer()
        channel = async_to_sync(layer.new_channel)()
        async_to_sync(layer.group_add)(LEADERBOARD_GROUP, channel)

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            award_points(learner, 10)

        assert len(callbacks) == 1
        message = async_to_sync(layer.receive)(channel)
        assert message["type"] == "lb.changed_all"

    def test_socket_client_told_to_refetch(self, learner, django_capture_on_commit_callbacks):
        def award():
            with django_capture_on_commit_callbacks(execute=True):
                award_points(learner, 10)

        async def listen():
            communicator = WebsocketCommunicator(LeaderboardConsumer.as_asgi(), "/ws/leaderboard/")
            connected, _ = await communicator.connect()
            assert connected
            await sync_to_async(award)()
            message = await communicator.receive_json_from(timeout=2)
            await communicator.disconnect()
            return message

        assert async_to_sync(listen)() == {"type": "lb_changed_all"}


class TestPointsSummary:
    def test_summary_payload(self, learner, badges, quiz, build_answers):
        from quizzes.services import submit_attempt
        submit_attempt(learner, quiz, build_answers(quiz, wrong=1))
        submit_attempt(learner, quiz, build_answers(quiz))
        award_points(learner, 140)

        summary = points_summary(learner)
        assert summary["points"] == {"total": 147, "from_quizzes": 7}
        assert summary["stats"] == {"total_quiz_attempts": 2, "perfect_scores": 1}
        assert summary["current_badge"].name == "Silver"
        assert summary["progress_to_next_badge"]["points_needed"] == 353
        assert [b["achieved"] for b in summary["all_badges"]] == [True, True, False]

    def test_endpoint(self, client_for, learner, badges):
        award_points(learner, 150)
        resp = client_for(learner).get("/api/me/points/")
        assert resp.status_code == 200
        assert resp.data["current_badge"]["name"] == "Silver"
        assert resp.data["progress_to_next_badge"]["badge"]["name"] == "Gold"
        assert resp.data["progress_to_next_badge"]["points_needed"] == 350


class TestLeaderboard:
    def test_ties_break_on_name(self, user_factory):
        zed = user_factory("zed", name="Zed")
        amy = user_factory("amy", name="Amy")
        top = user_factory("top", name="Top")
        for user, points in ((zed, 50), (amy, 50), (top, 80)):
            award_points(user, points)

        rows = leaderboard(10)["leaderboard"]
        assert [r["user"].name for r in rows] == ["Top", "Amy", "Zed"]
        assert [r["rank"] for r in rows] == [1, 2, 3]

    def test_current_user_outside_top(self, user_factory):
        users = [user_factory(f"u{i}", name=f"User {i}") for i in range(4)]
        for i, user in enumerate(users):
            award_points(user, 100 - i * 10)
        me = user_factory("me", name="Me")
        award_points(me, 5)

        data = leaderboard(2, me)
        assert len(data["leaderboard"]) == 2
        assert data["current_user"]["rank"] == 5
        assert data["current_user"]["total_points"] == 5

    def test_current_user_tied_on_points_ranks_after_by_name(self, user_factory):
        amy = user_factory("amy", name="Amy")
        zed = user_factory("zed", name="Zed")
        award_points(amy, 50)
        award_points(zed, 50)

        data = leaderboard(1, zed)
        assert [(r["rank"], r["user"].name) for r in data["leaderboard"]] == [(1, "Amy")]
        assert data["current_user"]["rank"] == 2

    def test_current_user_same_name_ranks_by_id(self, user_factory):
        first = user_factory("sam1", name="Sam")
        second = user_factory("sam2", name="Sam")
        award_points(first, 20)
        award_points(second, 20)

        assert leaderboard(1, second)["current_user"]["rank"] == 2

    def test_current_user_inside_top_has_no_extra_row(self, learner):
        award_points(learner, 10)
        assert leaderboard(25, learner)["current_user"] is None

    def test_endpoint_clamps_limit(self, api_client, user_factory):
        for i in range(3):
            award_points(user_factory(f"p{i}", name=f"P{i}"), 10 + i)
        resp = api_client.get("/api/leaderboard/?limit=0")
        assert resp.status_code == 200
        assert len(resp.data["leaderboard"]) == 1
        assert resp.data["current_user"] is None

    def test_endpoint_row_shape(self, client_for, learner, badges):
        award_points(learner, 120)
        resp = client_for(learner).get("/api/leaderboard/")
        row = resp.data["leaderboard"][0]
        assert row["rank"] == 1
        assert row["user"]["name"] == "Alice"
        assert row["badge"]["name"] == "Silver"


class TestBadgeLevelAdmin:
    def test_learner_can_read_not_write(self, client_for, learner, badges):
        client = client_for(learner)
        assert client.get("/api/badge-levels/").status_code == 200
        resp = client.post("/api/badge-levels/", {"name": "Platinum", "min_points": 1000, "sort_order": 4})
        assert resp.status_code == 403

    def test_superadmin_creates(self, client_for, superadmin):
        resp = client_for(superadmin).post(
            "/api/badge-levels/", {"name": "Platinum", "min_points": 1000, "sort_order": 4}, format="json"
        )
        assert resp.status_code == 201
