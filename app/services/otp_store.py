# app/services/otp_store.py
import secrets

import redis

from app.utils.logging import get_logger
from app.utils.retry import redis_retry
from app.utils.settings import OTP_TTL_SECONDS, SESSION_TTL_SECONDS

logger = get_logger(__name__)

#LUA porownaj i usun, atomowo
#-1 brak kodu (nie wyslany albo wygasl), 0 zly kod, 1 poprawny i usuniety
_VERIFY_LUA = """
local stored = redis.call('GET', KEYS[1])
if not stored then
    return -1
end
if stored == ARGV[1] then
    redis.call('DEL', KEYS[1])
    return 1
end
return 0
"""

OTP_MISSING = -1
OTP_MISMATCH = 0
OTP_OK = 1


class OtpStore:
    """
    Kody OTP w redisie: phone -> code.
    Tworzony przy wysylce, usuwany przy poprawnej weryfikacji, wygasa sam (EX).
    """

    def __init__(self, client: redis.Redis, ttl: int = OTP_TTL_SECONDS):
        self.redis = client
        self.ttl = ttl

    @staticmethod
    def _key(phone: str) -> str:
        return f"otp:{phone}"

    @redis_retry()
    def save(self, phone: str, code: str) -> None:
        #nowy kod nadpisuje poprzedni i resetuje ttl
        self.redis.set(name=self._key(phone), value=code, ex=self.ttl)
        logger.info(f"OTP stored for {phone}, ttl {self.ttl}s")

    @redis_retry()
    def verify(self, phone: str, code: str) -> int:
        return int(self.redis.eval(_VERIFY_LUA, 1, self._key(phone), code))


class SessionStore:
    """Tokeny sesji: token -> "user_id:role", z TTL."""

    def __init__(self, client: redis.Redis, ttl: int = SESSION_TTL_SECONDS):
        self.redis = client
        self.ttl = ttl

    @staticmethod
    def _key(token: str) -> str:
        return f"session:{token}"

    @redis_retry()
    def create(self, user_id: int, role: str) -> str:
        token = secrets.token_urlsafe(32)
        self.redis.set(name=self._key(token), value=f"{user_id}:{role}", ex=self.ttl)
        return token

    @redis_retry()
    def get(self, token: str) -> tuple[int, str] | None:
        value = self.redis.get(self._key(token))
        if not value:
            return None
        user_id, role = value.split(":", 1)
        return int(user_id), role

    @redis_retry()
    def delete(self, token: str) -> bool:
        return bool(self.redis.delete(self._key(token)))
