"""
Eccezioni Custom per l'applicazione.
Progetto: Fleet Manager (Gestione Flotta)

Definisce eccezioni specifiche del dominio per una gestione
centralizzata degli errori.

NOTA: BusinessValidationError è volutamente distinta da pydantic.ValidationError.
- pydantic.ValidationError: errori di formato/tipo nei dati di input (gestiti da FastAPI → 422)
- BusinessValidationError: violazioni delle regole di business logic (gestiti dal nostro handler → 422)
"""

import datetime
from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "ConflictError",
    "DuplicateError",
    "BusinessValidationError",
    "ValidationError",       # alias di BusinessValidationError
    "MileageRegressionError",
    "AuthorizationError",
    "TransactionFailure",
]


class AppException(Exception):
    """
    Base exception per l'applicazione.

    Tutte le eccezioni custom ereditano da questa classe base.

    Attributes:
        status_code: HTTP status code da restituire al client
        error_code: Identificativo univoco dell'errore per il frontend
        detail: Messaggio di errore leggibile per l'utente
        extra: Dizionario con dati aggiuntivi per il frontend
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Inizializza l'eccezione.

        Args:
            detail: Messaggio di errore dettagliato
            error_code: Identificativo univoco (default: quello di classe)
            extra: Dati aggiuntivi da passare al frontend (default: None)
        """
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)

    def to_dict(self) -> Dict[str, Any]:
        """Corpo JSON della risposta di errore."""
        body: Dict[str, Any] = {
            "detail": self.detail,
            "error_code": self.error_code,
        }
        if self.extra is not None:
            body["extra"] = self.extra
        return body


class NotFoundError(AppException):
    """
    Eccezione sollevata quando una risorsa non viene trovata.

    Utilizzata quando un'entità cercata non esiste nel database
    (veicolo, registrazione viaggio, utente, ...).
    """

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Risorsa non trovata",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class ConflictError(AppException):
    """
    Eccezione sollevata per conflitti di stato.

    Utilizzata quando un'operazione non può essere eseguita
    a causa dello stato corrente della risorsa
    (es. un viaggio già aperto sullo stesso veicolo).
    """

    status_code: int = 409
    error_code: str = "CONFLICT_STATE"

    def __init__(
        self,
        detail: str = "Conflitto di stato",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class DuplicateError(ConflictError):
    """
    Eccezione sollevata quando si tenta di creare una risorsa duplicata.

    Utilizzata per violazioni di vincoli unique (es. targa già registrata).
    """

    status_code: int = 409
    error_code: str = "DUPLICATE_RESOURCE"

    def __init__(
        self,
        detail: str = "Risorsa già esistente",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Eccezione sollevata per violazioni delle regole di business logic.

    Eredita da ValueError per essere catturata dai validatori Pydantic.

    NON confondere con pydantic.ValidationError che gestisce
    la validazione dello schema/formato dei dati in input.

    Esempi di utilizzo:
        - "I km finali devono essere maggiori o uguali ai km iniziali"
        - "La registrazione non riporta alcuna anomalia"
    """

    status_code: int = 422
    error_code: str = "BUSINESS_VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validazione dati fallita",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


# Alias per compatibilità
ValidationError = BusinessValidationError


class MileageRegressionError(BusinessValidationError):
    """
    Eccezione sollevata quando un nuovo chilometraggio è inferiore
    all'ultimo chilometraggio noto del veicolo.

    Errore recuperabile: il chiamante riceve il valore tentato e
    l'ultimo valore noto con la sua data per decidere come correggere.

    Attributes:
        attempted: Chilometraggio inserito
        last_known: Ultimo chilometraggio noto
        last_known_date: Data dell'ultimo chilometraggio noto
    """

    error_code: str = "MILEAGE_REGRESSION"

    def __init__(
        self,
        attempted: int,
        last_known: int,
        last_known_date: Optional[datetime.date],
    ) -> None:
        self.attempted = attempted
        self.last_known = last_known
        self.last_known_date = last_known_date
        date_label = last_known_date.strftime("%d/%m/%Y") if last_known_date else "N/D"
        super().__init__(
            f"Il chilometraggio inserito ({attempted}) è inferiore all'ultimo "
            f"registrato ({last_known} il {date_label})",
            extra={
                "attempted": attempted,
                "last_known": last_known,
                "last_known_date": last_known_date.isoformat() if last_known_date else None,
            },
        )


class AuthorizationError(AppException):
    """
    Eccezione sollevata per accesso non autorizzato.

    Utilizzata quando un utente tenta di accedere a una risorsa
    o eseguire un'operazione per cui non ha i permessi necessari.

    Esempi di utilizzo:
        - "Non hai i permessi per eliminare questa registrazione"
    """

    status_code: int = 403
    error_code: str = "FORBIDDEN"

    def __init__(
        self,
        detail: str = "Accesso non autorizzato",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class TransactionFailure(AppException):
    """
    Eccezione sollevata quando un'operazione transazionale fallisce.

    Tutte le modifiche della transazione vengono annullate; al client
    arriva solo un messaggio generico.
    """

    status_code: int = 500
    error_code: str = "TRANSACTION_FAILURE"

    def __init__(
        self,
        detail: str = "Operazione non completata: nessuna modifica è stata salvata",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)
