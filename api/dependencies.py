"""
API dependencies - authentication, role guards and service wiring
"""
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer, OAuth2PasswordBearer

from application.ports.payment_gateway import PaymentGateway
from application.services.contest_service import ContestApplicationService
from application.services.participation_service import ParticipationApplicationService
from application.services.payment_service import PaymentApplicationService
from application.services.token_service import TokenService
from domain.common.exceptions import ForbiddenException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.user.entity import Identity, Role
from infrastructure.external.payments import get_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork

# Tokens are issued by the identity provider; the URL only feeds Swagger UI
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/token",
    scheme_name="OAuth2",
    auto_error=False,
)

http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Bearer token authentication",
    auto_error=False,
)


async def get_token(
    oauth2_token: Optional[str] = Depends(oauth2_scheme),
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> str:
    """Extract the token from the OAuth2 or Bearer scheme"""
    if oauth2_token:
        return oauth2_token
    if bearer_token and bearer_token.credentials:
        return bearer_token.credentials
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_service() -> TokenService:
    return TokenService()


async def get_current_identity(
    token: str = Depends(get_token),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    return tokens.verify_access_token(token)


def require_roles(*roles: Role) -> Callable[..., Identity]:
    """Dependency factory: the caller's role must be one of ``roles``."""
    allowed = frozenset(roles)

    async def _guard(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            raise ForbiddenException(
                "Insufficient role for this operation",
                details={"role": identity.role.value, "allowed": sorted(r.value for r in allowed)},
            )
        return identity

    return _guard


def get_uow_factory() -> Callable[..., AbstractUnitOfWork]:
    return SQLAlchemyUnitOfWork


def get_gateway() -> PaymentGateway:
    return get_payment_gateway()


async def get_payment_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
    gateway: PaymentGateway = Depends(get_gateway),
) -> PaymentApplicationService:
    return PaymentApplicationService(uow_factory=uow_factory, gateway=gateway)


async def get_participation_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
) -> ParticipationApplicationService:
    return ParticipationApplicationService(uow_factory=uow_factory)


async def get_contest_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
) -> ContestApplicationService:
    return ContestApplicationService(uow_factory=uow_factory)
