"""
Router per la gestione utenti (solo amministratori)
Progetto: Fleet Manager (Gestione Flotta)
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminUser
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.services.auth_service import auth_service

router = APIRouter(
    prefix="/users",
    tags=["Utenti"],
)


@router.get(
    "/",
    name="utenti_lista",
    summary="Lista utenti",
    response_model=list[UserResponse],
)
async def get_users(
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> list[UserResponse]:
    users = await auth_service.list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.post(
    "/",
    name="utente_crea",
    summary="Crea utente",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    data: UserCreate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await auth_service.register(db, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}",
    name="utente_aggiorna",
    summary="Aggiorna utente",
    response_model=UserResponse,
)
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await auth_service.update_user(db, user_id, data)
    await db.commit()
    return UserResponse.model_validate(user)
