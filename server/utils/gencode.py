import random
import string
import time
from rest_framework_simplejwt.tokens import RefreshToken

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def generate_certificate_number():
    # CERT-<ms timestamp in base36>-<6 random chars>
    stamp = _to_base36(int(time.time() * 1000))
    suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"CERT-{stamp}-{suffix}"


def generate_order_id():
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=10))
    return f"order_{_to_base36(int(time.time() * 1000)).lower()}{suffix}"


def get_tokens_for_user(user):
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }
