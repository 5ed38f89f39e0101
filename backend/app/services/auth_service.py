"""
Servizio per autenticazione e gestione utenti
Progetto: Fleet Manager (Gestione Flotta)

Business logic per registrazione, login, refresh token e
amministrazione degli utenti (admin / dipendenti).
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateError, NotFoundError
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from app.models.user import User, UserRole
from app.schemas.token import TokenResponse
from app.schemas.user import UserCreate, UserLogin, UserUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _issue_tokens(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(str(user.id), user.role),
        refresh_token=create_refresh_token(str(user.id), user.role),
        token_type="bearer",
    )


class AuthService:
    """Servizio per la gestione di autenticazione e utenti."""

    async def count_users(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(User.id)))
        return result.scalar() or 0

    async def register(self, db: AsyncSession, data: UserCreate) -> User:
        """
        Registra un nuovo utente.

        Il primo utente registrato diventa sempre amministratore.

        Raises:
            DuplicateError: Se l'email è già registrata
        """
        result = await db.execute(select(User).where(User.email == data.email))
        if result.scalar_one_or_none() is not None:
            logger.warning(f"Registrazione con email già in uso: {data.email}")
            raise DuplicateError(f"L'email {data.email} è già registrata")

        role = data.role
        if await self.count_users(db) == 0:
            role = UserRole.ADMIN

        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
            full_name=data.full_name,
            role=role.value,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Registrato utente {user.email} con ruolo {user.role}")
        return user

    async def login(self, db: AsyncSession, data: UserLogin) -> TokenResponse:
        """
        Autentica un utente e restituisce i token JWT.

        Raises:
            HTTPException 401: Credenziali errate o utente disattivato
        """
        result = await db.execute(select(User).where(User.email == data.email))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(data.password, user.hashed_password):
            logger.warning(f"Login fallito per {data.email}")
            raise _credentials_error("Email o password non corretti")

        if not user.is_active:
            raise _credentials_error("Utente disattivato")

        logger.info(f"Login effettuato: {user.email}")
        return _issue_tokens(user)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        """
        Rinnova la coppia di token a partire da un refresh token.

        Raises:
            HTTPException 401: Token non valido, utente assente o disattivato
        """
        token_data = decode_token(refresh_token)

        if token_data.type != "refresh":
            raise _credentials_error("Token di accesso non valido per il refresh")

        try:
            user_id = UUID(token_data.sub)
        except ValueError:
            raise _credentials_error("ID utente invalido nel token")

        user = await db.get(User, user_id)
        if user is None:
            raise _credentials_error("Utente non trovato")
        if not user.is_active:
            raise _credentials_error("Utente disattivato")

        return _issue_tokens(user)

    async def get_user_by_id(self, db: AsyncSession, user_id: UUID) -> User:
        """
        Raises:
            NotFoundError: Se l'utente non esiste
        """
        user = await db.get(User, user_id)
        if user is None:
            logger.warning(f"Utente non trovato: {user_id}")
            raise NotFoundError(f"Utente con ID {user_id} non trovato")
        return user

    async def list_users(self, db: AsyncSession) -> list[User]:
        """Tutti gli utenti, in ordine alfabetico."""
        result = await db.execute(select(User).order_by(User.full_name.asc()))
        return list(result.scalars().all())

    async def update_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: UserUpdate,
    ) -> User:
        """Aggiorna nome, ruolo o stato di un utente."""
        user = await self.get_user_by_id(db, user_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if isinstance(value, UserRole):
                value = value.value
            setattr(user, field, value)

        await db.flush()
        await db.refresh(user)

        logger.info(f"Aggiornato utente: {user.email}")
        return user


# Istanza globale del service
auth_service = AuthService()


__all__ = [
    "AuthService",
    "auth_service",
]
