import os
import django
from django.core.asgi import get_asgi_application
from channels.auth import AuthMiddlewareStack
from channels.routing import ProtocolTypeRouter, URLRouter
from channels.security.websocket import AllowedHostsOriginValidator

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "server.settings")
django.setup()
from utils.middleware import RequestIDWebSocketMiddleware, JWTAuthMiddleware
from progress.routing import websocket_urlpatterns

django_asgi_app = get_asgi_application()

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": AllowedHostsOriginValidator(
        # RequestID -> JWTAuth -> AuthStack -> Router
        RequestIDWebSocketMiddleware(
            JWTAuthMiddleware(
                AuthMiddlewareStack(
                    URLRouter(websocket_urlpatterns),
                )
            )
        )
    ),
})
