"""
Service Layer per i documenti dei veicoli
Progetto: Fleet Manager (Gestione Flotta)

Gestisce i metadati dei documenti; i file veri e propri passano
dall'archivio file locale (app.core.storage).
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BusinessValidationError, NotFoundError
from app.core.storage import FileStorage, get_file_storage
from app.models import Vehicle, VehicleDocument
from app.schemas.document import DocumentCreate

# Logger per questo modulo
logger = logging.getLogger(__name__)


class DocumentService:
    """
    Service per caricamento, elenco ed eliminazione dei documenti.

    Args:
        storage: Archivio file (default: quello configurato in settings)
    """

    def __init__(self, storage: Optional[FileStorage] = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> FileStorage:
        if self._storage is None:
            self._storage = get_file_storage()
        return self._storage

    async def get_by_id(self, db: AsyncSession, document_id: uuid.UUID) -> VehicleDocument:
        """
        Raises:
            NotFoundError: Se il documento non esiste
        """
        document = await db.get(VehicleDocument, document_id)
        if document is None:
            logger.warning(f"Documento non trovato: {document_id}")
            raise NotFoundError("Documento non trovato")
        return document

    async def list_by_vehicle(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
    ) -> list[VehicleDocument]:
        """Documenti del veicolo dal più recente."""
        if await db.get(Vehicle, vehicle_id) is None:
            raise NotFoundError("Veicolo non trovato")

        result = await db.execute(
            select(VehicleDocument)
            .where(VehicleDocument.vehicle_id == vehicle_id)
            .order_by(VehicleDocument.created_at.desc())
        )
        return list(result.scalars().all())

    async def upload(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        data: DocumentCreate,
        file_name: str,
        content_type: Optional[str],
        content: bytes,
    ) -> VehicleDocument:
        """
        Salva il file e registra il documento.

        Raises:
            NotFoundError: Se il veicolo non esiste
            BusinessValidationError: Se il file è vuoto o di tipo non ammesso
        """
        if await db.get(Vehicle, vehicle_id) is None:
            raise NotFoundError("Veicolo non trovato")

        if content_type not in settings.allowed_document_types:
            logger.warning(f"Tipo di file rifiutato: {content_type}")
            raise BusinessValidationError("Tipo di file non supportato. Usa PDF o immagini.")

        if not content:
            raise BusinessValidationError("Nessun file caricato")

        file_url = self.storage.save(file_name, content)

        document = VehicleDocument(
            vehicle_id=vehicle_id,
            type=data.type.value,
            title=data.title,
            year=data.year,
            file_url=file_url,
            file_type=content_type,
            expiry_date=data.expiry_date,
            notes=data.notes,
        )
        db.add(document)
        try:
            await db.flush()
            await db.refresh(document)
        except SQLAlchemyError:
            # Nessun record: il file appena salvato non deve restare su disco
            self.storage.delete(file_url)
            raise

        logger.info(f"Caricato documento {document.id} ({document.title}) sul veicolo {vehicle_id}")
        return document

    async def delete(self, db: AsyncSession, document_id: uuid.UUID) -> None:
        """
        Elimina il documento e, in best effort, il file su disco.
        """
        document = await self.get_by_id(db, document_id)
        file_url = document.file_url

        await db.delete(document)
        await db.flush()

        self.storage.delete(file_url)
        logger.info(f"Eliminato documento: {document_id}")


# Istanza globale del service
document_service = DocumentService()
