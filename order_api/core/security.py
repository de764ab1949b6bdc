from fastapi import Depends, Header
from order_api.core.config import settings
from order_api.core.errors import AuthenticationError
from order_api.services.identity import CallerIdentity, IdentityClient, parse_bearer

def get_identity_client() -> IdentityClient:
    return IdentityClient()

def require_caller(
    authorization: str | None = Header(default=None),
    identity: IdentityClient = Depends(get_identity_client),
) -> CallerIdentity:
    token = parse_bearer(authorization)
    return identity.get_caller(token)

def require_chat_key(x_chat_key: str = Header(default="", alias="X-CHAT-KEY")) -> None:
    if not x_chat_key or not settings.CHAT_ORDER_KEY or x_chat_key != settings.CHAT_ORDER_KEY:
        raise AuthenticationError("invalid chat order key")
