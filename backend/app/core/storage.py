"""
Archivio file locale per i documenti dei veicoli
Progetto: Fleet Manager (Gestione Flotta)

Salva i file caricati su disco e li rimuove quando il documento
o il veicolo proprietario vengono eliminati.
"""

import logging
import re
import time
from pathlib import Path

from app.core.config import settings

# Logger per questo modulo
logger = logging.getLogger(__name__)


class FileStorage:
    """
    Archivio file su filesystem locale.

    I file vengono salvati in `base_dir` e referenziati tramite un URL
    pubblico composto da `url_prefix` e dal nome file.
    """

    def __init__(self, base_dir: str, url_prefix: str) -> None:
        self.base_dir = Path(base_dir)
        self.url_prefix = url_prefix.rstrip("/")

    @staticmethod
    def build_file_name(original_name: str) -> str:
        """
        Costruisce un nome file univoco: timestamp in millisecondi
        seguito dal nome originale senza spazi.
        """
        safe_name = re.sub(r"\s+", "_", Path(original_name).name) or "documento"
        return f"{int(time.time() * 1000)}-{safe_name}"

    def save(self, original_name: str, content: bytes) -> str:
        """
        Salva il contenuto su disco.

        Args:
            original_name: Nome file originale
            content: Contenuto binario

        Returns:
            URL pubblico del file salvato
        """
        self.base_dir.mkdir(parents=True, exist_ok=True)
        file_name = self.build_file_name(original_name)
        (self.base_dir / file_name).write_bytes(content)
        logger.info(f"Salvato file documento: {file_name} ({len(content)} byte)")
        return f"{self.url_prefix}/{file_name}"

    def path_for(self, file_url: str) -> Path:
        """Percorso su disco corrispondente a un URL pubblico."""
        return self.base_dir / Path(file_url).name

    def delete(self, file_url: str) -> None:
        """
        Elimina un file in modalità best effort.

        Un file già assente viene ignorato; gli altri errori di I/O
        vengono loggati senza interrompere l'eliminazione del record.
        """
        file_path = self.path_for(file_url)
        try:
            file_path.unlink()
            logger.info(f"Eliminato file documento: {file_path.name}")
        except FileNotFoundError:
            logger.debug(f"File documento già assente: {file_path}")
        except OSError as e:
            logger.error(f"Impossibile eliminare il file {file_path}: {e}")


def get_file_storage() -> FileStorage:
    """
    Factory per l'archivio file configurato.

    Returns:
        Istanza di FileStorage
    """
    return FileStorage(settings.upload_dir, settings.upload_url_prefix)


__all__ = ["FileStorage", "get_file_storage"]
