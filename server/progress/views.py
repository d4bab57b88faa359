from drf_spectacular.utils import extend_schema
from rest_framework import permissions, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from progress.models import BadgeLevel
from progress.serializers import BadgeLevelSerializer, LeaderboardSerializer, PointsSummarySerializer
from progress.services import leaderboard, points_summary
from utils.filter_params import LEADERBOARD_PARAMS, parse_limit
from utils.permissions import IsSuperAdminOrReadOnly


class BadgeLevelViewSet(viewsets.ModelViewSet):
    queryset = BadgeLevel.objects.all()
    serializer_class = BadgeLevelSerializer
    permission_classes = [IsSuperAdminOrReadOnly]


class MyPointsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: PointsSummarySerializer})
    def get(self, request):
        return Response(PointsSummarySerializer(points_summary(request.user)).data)


class LeaderboardView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(parameters=LEADERBOARD_PARAMS, responses={200: LeaderboardSerializer})
    def get(self, request):
        limit = parse_limit(request.query_params.get("limit"))
        data = leaderboard(limit, request.user)
        return Response(LeaderboardSerializer(data).data)
