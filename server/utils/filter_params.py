from drf_spectacular.utils import OpenApiParameter

LEADERBOARD_PARAMS = [
    OpenApiParameter("limit", int, OpenApiParameter.QUERY, description="Rows to return, 1-100 (default 25)."),
]

COURSE_FILTER_PARAMS = [
    OpenApiParameter("search", str, OpenApiParameter.QUERY, description="Match on title."),
    OpenApiParameter("access_rule", str, OpenApiParameter.QUERY, enum=["open", "invitation", "payment"]),
]


def parse_limit(raw, default=25, lo=1, hi=100):
    """Clamp a ?limit= query value; unparsable values fall back to default."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return min(max(value, lo), hi)
