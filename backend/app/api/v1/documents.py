"""
Router FastAPI per i documenti dei veicoli
Progetto: Fleet Manager (Gestione Flotta)

Caricamento multipart di PDF e immagini (libretto, assicurazione, altro).
"""

import datetime
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminUser
from app.core.exceptions import BusinessValidationError
from app.schemas.document import DocumentCreate, DocumentRead, DocumentType
from app.services.document_service import document_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documenti"])


@router.get(
    "/vehicles/{vehicle_id}/documents",
    name="documenti_lista",
    summary="Documenti del veicolo",
    response_model=list[DocumentRead],
)
async def get_vehicle_documents(
    vehicle_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> list[DocumentRead]:
    documents = await document_service.list_by_vehicle(db, vehicle_id)
    return [DocumentRead.model_validate(d) for d in documents]


@router.post(
    "/vehicles/{vehicle_id}/documents",
    name="documento_carica",
    summary="Carica documento",
    description="Carica un PDF o un'immagine. Il titolo è derivato dal tipo di documento.",
    response_model=DocumentRead,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    vehicle_id: uuid.UUID,
    admin: AdminUser,
    file: UploadFile = File(..., description="File PDF, JPEG o PNG"),
    document_type: DocumentType = Form(..., alias="type"),
    title: Optional[str] = Form(None),
    year: Optional[int] = Form(None),
    expiry_date: Optional[datetime.date] = Form(None),
    notes: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
) -> DocumentRead:
    try:
        metadata = DocumentCreate(
            type=document_type,
            title=title,
            year=year,
            expiry_date=expiry_date,
            notes=notes,
        )
    except PydanticValidationError as e:
        raise BusinessValidationError(e.errors()[0]["msg"])

    content = await file.read()
    document = await document_service.upload(
        db,
        vehicle_id,
        metadata,
        file_name=file.filename or "documento",
        content_type=file.content_type,
        content=content,
    )
    await db.commit()
    return DocumentRead.model_validate(document)


@router.delete(
    "/documents/{document_id}",
    name="documento_elimina",
    summary="Elimina documento",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_document(
    document_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await document_service.delete(db, document_id)
    await db.commit()
