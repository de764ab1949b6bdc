from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from order_api.core.config import settings
from order_api.core.errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    user_id: str
    email: str | None = None


class IdentityClient:
    """Identity provider(`/auth/v1/user`)로 bearer token을 호출자 id로 바꾼다.

    - 실패 이유는 로그에만 남기고, 호출자에게는 AuthenticationError만 전달
    """
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        base_url = base_url or settings.AUTH_BASE_URL
        if not base_url:
            raise ConfigurationError("AUTH_BASE_URL is not set")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else settings.AUTH_API_KEY
        self.transport = transport

    def _headers(self, token: str) -> dict[str, str]:
        h: dict[str, str] = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            h["apikey"] = self.api_key
        return h

    def get_caller(self, token: str, timeout_s: float | None = None) -> CallerIdentity:
        url = f"{self.base_url}/auth/v1/user"
        timeout = timeout_s if timeout_s is not None else settings.AUTH_TIMEOUT_S
        try:
            with httpx.Client(timeout=timeout, transport=self.transport) as c:
                r = c.get(url, headers=self._headers(token))
        except httpx.HTTPError as e:
            raise AuthenticationError(f"identity provider unreachable: {e}") from e

        if r.status_code != 200:
            raise AuthenticationError(f"identity provider returned {r.status_code}")

        try:
            data = r.json()
        except ValueError as e:
            raise AuthenticationError("identity provider returned invalid JSON") from e

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            raise AuthenticationError("identity provider returned no user id")
        return CallerIdentity(user_id=str(user_id), email=data.get("email"))


def parse_bearer(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("missing bearer credential")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthenticationError("empty bearer credential")
    return token
