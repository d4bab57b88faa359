from rest_framework import serializers

from progress.models import BadgeLevel
from users.serializers import UserBriefSerializer


class BadgeLevelSerializer(serializers.ModelSerializer):
    class Meta:
        model = BadgeLevel
        fields = ("id", "name", "min_points", "sort_order")


class BadgeBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = BadgeLevel
        fields = ("id", "name", "min_points")
        read_only_fields = fields


class BadgeProgressSerializer(serializers.Serializer):
    badge = BadgeBriefSerializer()
    points_needed = serializers.IntegerField()
    progress_percent = serializers.IntegerField()


class BadgeAchievementSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    min_points = serializers.IntegerField()
    achieved = serializers.BooleanField()


class PointsSummarySerializer(serializers.Serializer):
    points = serializers.DictField(child=serializers.IntegerField())
    stats = serializers.DictField(child=serializers.IntegerField())
    current_badge = BadgeBriefSerializer(allow_null=True)
    progress_to_next_badge = BadgeProgressSerializer(allow_null=True)
    all_badges = BadgeAchievementSerializer(many=True)


class LeaderboardRowSerializer(serializers.Serializer):
    rank = serializers.IntegerField()
    user = UserBriefSerializer()
    total_points = serializers.IntegerField()
    badge = BadgeBriefSerializer(allow_null=True)


class LeaderboardSerializer(serializers.Serializer):
    leaderboard = LeaderboardRowSerializer(many=True)
    current_user = LeaderboardRowSerializer(allow_null=True)
