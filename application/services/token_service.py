"""
Token verification - tokens are issued elsewhere, this service only checks them
"""
from typing import Optional

import jwt

from core.config import settings
from core.exceptions import TokenExpiredException, UnauthorizedException
from core.logging_config import get_logger
from domain.user.entity import Identity, Role


logger = get_logger(__name__)


class TokenService:
    """Decode HS256 access tokens into an Identity (``sub``, ``role``, optional ``email``)."""

    def __init__(self, secret_key: Optional[str] = None, algorithm: Optional[str] = None):
        self._secret_key = secret_key or settings.SECRET_KEY
        self._algorithm = algorithm or settings.ALGORITHM

    def verify_access_token(self, token: str) -> Identity:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.InvalidTokenError as exc:
            logger.warning("invalid_access_token", error=str(exc))
            raise UnauthorizedException("Invalid authentication credentials")

        user_id = payload.get("sub")
        role = payload.get("role")
        try:
            return Identity(
                user_id=int(user_id),
                role=Role(role),
                email=payload.get("email"),
            )
        except (TypeError, ValueError):
            logger.warning("access_token_missing_claims", sub=user_id, role=role)
            raise UnauthorizedException("Token is missing required claims")
