from uuid import uuid4
from urllib.parse import parse_qs

from channels.middleware import BaseMiddleware
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .config_log import request_id_ctx


class RequestIDMiddleware:
    """
    - Take X-Request-ID from the client or generate one.
    - Store it in the ContextVar read by the logging filter.
    - Echo it back in the response header.
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        rid = request.headers.get("X-Request-ID") or uuid4().hex[:12]
        token = request_id_ctx.set(rid)
        try:
            response = self.get_response(request)
        finally:
            request_id_ctx.reset(token)
        response["X-Request-ID"] = rid
        return response


class RequestIDWebSocketMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        # header first, then ?rid=, then generate
        headers = dict(scope.get("headers", []))
        rid = (
            headers.get(b"x-request-id", b"").decode()
            or parse_qs(scope.get("query_string", b"").decode()).get("rid", [None])[0]
            or uuid4().hex[:12]
        )

        token = request_id_ctx.set(rid)
        scope["request_id"] = rid

        try:
            return await self.app(scope, receive, send)
        finally:
            request_id_ctx.reset(token)


class JWTAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        scope["user"] = AnonymousUser()

        token = None

        qs = parse_qs(scope.get("query_string", b"").decode())
        if "token" in qs:
            token = qs["token"][0]

        if not token:
            headers = dict(scope.get("headers", []))
            auth = headers.get(b"authorization")
            if auth:
                try:
                    prefix, token = auth.decode().split()
                    if prefix.lower() != "bearer":
                        token = None
                except ValueError:
                    token = None

        if token:
            User = get_user_model()
            try:
                validated = AccessToken(token)
                scope["user"] = await User.objects.aget(id=validated["user_id"])
            except (TokenError, KeyError, User.DoesNotExist):
                scope["user"] = AnonymousUser()

        return await super().__call__(scope, receive, send)
