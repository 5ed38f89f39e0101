"""
Schemas Pydantic per l'autenticazione JWT
Progetto: Fleet Manager (Gestione Flotta)
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Coppia di token restituita da login e refresh."""

    access_token: str = Field(..., description="Token di accesso JWT")
    refresh_token: str = Field(..., description="Token di refresh JWT")
    token_type: str = Field(default="bearer", description="Tipo di token")


class TokenRefresh(BaseModel):
    """Richiesta di rinnovo dei token."""

    refresh_token: str = Field(..., description="Token di refresh JWT")


class TokenPayload(BaseModel):
    """
    Payload decodificato di un token JWT.

    Attributes:
        sub: ID dell'utente come stringa
        role: Ruolo dell'utente (admin / employee)
        exp: Data/ora di scadenza
        type: "access" o "refresh"
    """

    sub: str = Field(..., description="ID utente")
    role: str = Field(..., description="Ruolo dell'utente")
    exp: datetime = Field(..., description="Data/ora di scadenza")
    type: str = Field(..., description="Tipo di token (access/refresh)")


__all__ = [
    "TokenResponse",
    "TokenRefresh",
    "TokenPayload",
]
