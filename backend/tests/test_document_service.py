"""
Test per l'archivio file e il DocumentService.
"""

import uuid

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import BusinessValidationError, NotFoundError
from app.schemas.document import DocumentCreate, DocumentType, derive_title
from app.services.document_service import DocumentService


# ============================================================
# Archivio file
# ============================================================


class TestFileStorage:
    """Test per l'archivio su filesystem locale."""

    def test_file_name_without_spaces(self, storage):
        name = storage.build_file_name("polizza auto 2024.pdf")

        timestamp, _, original = name.partition("-")
        assert timestamp.isdigit()
        assert original == "polizza_auto_2024.pdf"

    def test_save_and_delete(self, storage):
        url = storage.save("libretto.pdf", b"%PDF-1.4")

        assert url.startswith("/uploads/documents/")
        path = storage.path_for(url)
        assert path.read_bytes() == b"%PDF-1.4"

        storage.delete(url)
        assert not path.exists()

    def test_delete_missing_file_is_ignored(self, storage):
        storage.delete("/uploads/documents/non-esiste.pdf")

    def test_path_ignores_directories_in_url(self, storage):
        path = storage.path_for("/uploads/documents/../../etc/passwd")
        assert path.parent == storage.base_dir


# ============================================================
# Titolo documento
# ============================================================


class TestDeriveTitle:
    """Test per il titolo derivato dal tipo di documento."""

    def test_registration_certificate(self):
        assert derive_title(DocumentType.LIBRETTO_CIRCOLAZIONE, None, "ignorato") == "Libretto di circolazione"

    def test_insurance_uses_year(self):
        assert derive_title(DocumentType.ASSICURAZIONE, 2024, None) == "Assicurazione 2024"

    def test_insurance_requires_year(self):
        with pytest.raises(ValueError):
            derive_title(DocumentType.ASSICURAZIONE, None, None)

    def test_other_requires_title(self):
        with pytest.raises(ValueError):
            derive_title(DocumentType.ALTRO, None, "   ")

    def test_other_keeps_title(self):
        assert derive_title(DocumentType.ALTRO, None, " Contratto noleggio ") == "Contratto noleggio"

    def test_schema_fills_title(self):
        data = DocumentCreate(type=DocumentType.ASSICURAZIONE, year=2025)
        assert data.title == "Assicurazione 2025"

    def test_schema_rejects_missing_year(self):
        with pytest.raises(PydanticValidationError):
            DocumentCreate(type=DocumentType.ASSICURAZIONE)


# ============================================================
# Service
# ============================================================


class TestDocumentService:
    """Test per caricamento ed eliminazione dei documenti."""

    async def test_upload_and_list(self, db, vehicle, storage):
        service = DocumentService(storage=storage)

        document = await service.upload(
            db, vehicle.id,
            DocumentCreate(type=DocumentType.ASSICURAZIONE, year=2024),
            file_name="polizza.pdf", content_type="application/pdf", content=b"%PDF-1.4",
        )
        documents = await service.list_by_vehicle(db, vehicle.id)

        assert document.title == "Assicurazione 2024"
        assert document.file_type == "application/pdf"
        assert storage.path_for(document.file_url).exists()
        assert [d.id for d in documents] == [document.id]

    async def test_rejects_unsupported_type(self, db, vehicle, storage):
        service = DocumentService(storage=storage)

        with pytest.raises(BusinessValidationError):
            await service.upload(
                db, vehicle.id,
                DocumentCreate(type=DocumentType.LIBRETTO_CIRCOLAZIONE),
                file_name="script.sh", content_type="text/x-shellscript", content=b"echo",
            )

    async def test_rejects_empty_file(self, db, vehicle, storage):
        service = DocumentService(storage=storage)

        with pytest.raises(BusinessValidationError):
            await service.upload(
                db, vehicle.id,
                DocumentCreate(type=DocumentType.LIBRETTO_CIRCOLAZIONE),
                file_name="vuoto.pdf", content_type="application/pdf", content=b"",
            )

    async def test_upload_to_missing_vehicle(self, db, storage):
        service = DocumentService(storage=storage)

        with pytest.raises(NotFoundError):
            await service.upload(
                db, uuid.uuid4(),
                DocumentCreate(type=DocumentType.LIBRETTO_CIRCOLAZIONE),
                file_name="libretto.pdf", content_type="application/pdf", content=b"%PDF",
            )

    async def test_failed_flush_removes_saved_file(self, db, vehicle, storage):
        """Senza record a database il file caricato non resta su disco."""
        service = DocumentService(storage=storage)
        # Titolo mancante: la colonna è NOT NULL
        data = DocumentCreate.model_construct(
            type=DocumentType.ALTRO, title=None, year=None, expiry_date=None, notes=None
        )

        with pytest.raises(IntegrityError):
            await service.upload(
                db, vehicle.id, data,
                file_name="contratto.pdf", content_type="application/pdf", content=b"%PDF-1.4",
            )
        await db.rollback()

        assert list(storage.base_dir.iterdir()) == []

    async def test_delete_removes_file(self, db, vehicle, storage):
        service = DocumentService(storage=storage)
        document = await service.upload(
            db, vehicle.id,
            DocumentCreate(type=DocumentType.ALTRO, title="Contratto"),
            file_name="contratto.png", content_type="image/png", content=b"\x89PNG",
        )
        path = storage.path_for(document.file_url)

        await service.delete(db, document.id)

        assert not path.exists()
        with pytest.raises(NotFoundError):
            await service.get_by_id(db, document.id)
