"""
Router per l'autenticazione
Progetto: Fleet Manager (Gestione Flotta)

Endpoints per registrazione iniziale, login, refresh token e profilo utente.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentUser
from app.core.exceptions import AuthorizationError
from app.schemas.token import TokenRefresh, TokenResponse
from app.schemas.user import UserCreate, UserLogin, UserResponse
from app.services.auth_service import auth_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Autenticazione"],
)


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registra il primo utente",
)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Registrazione libera consentita solo a sistema vuoto: il primo utente
    diventa amministratore. Gli utenti successivi vengono creati da un
    amministratore tramite /users.
    """
    if await auth_service.count_users(db) > 0:
        raise AuthorizationError(
            "Registrazione chiusa: i nuovi utenti vengono creati da un amministratore"
        )

    user = await auth_service.register(db, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Effettua il login",
)
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await auth_service.login(db, data)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Rinnova i token",
)
async def refresh_token(
    data: TokenRefresh,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await auth_service.refresh(db, data.refresh_token)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Profilo utente corrente",
)
async def get_me(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)
