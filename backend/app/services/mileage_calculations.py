"""
Calcoli puri sul chilometraggio
Progetto: Fleet Manager (Gestione Flotta)

Funzioni senza accesso al database, usate dal servizio chilometraggio:
- scelta dell'ultimo chilometraggio noto tra i flussi di eventi
- verifica di regressione del contachilometri
- media annua km e consumo medio
"""

import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from app.schemas.mileage import LastKnownMileage, MileageReading

# Sotto questa soglia di giorni la media annua coincide con i km attuali
MIN_HISTORY_DAYS = 30


def pick_last_known(candidates: Iterable[Optional[MileageReading]]) -> LastKnownMileage:
    """
    Sceglie l'ultimo chilometraggio noto tra i candidati dei vari flussi.

    Vince la data più recente; a parità di data vince il chilometraggio
    più alto, così il valore noto non regredisce mai.

    Args:
        candidates: Ultima lettura di ciascun flusso (None se il flusso è vuoto)

    Returns:
        LastKnownMileage con km=0 e as_of=None se non ci sono letture
    """
    readings = [c for c in candidates if c is not None]
    if not readings:
        return LastKnownMileage(km=0, as_of=None, source=None)

    best = max(readings, key=lambda r: (r.date, r.km))
    return LastKnownMileage(km=best.km, as_of=best.date, source=best.source)


def is_regression(
    last_known: LastKnownMileage,
    reading_date: datetime.date,
    km: int,
) -> bool:
    """
    True se la nuova lettura fa regredire il contachilometri.

    Le letture con data precedente all'ultimo valore noto non vengono
    confrontate: solo quelle nella stessa data o successive.
    """
    if last_known.as_of is None:
        return False
    return reading_date >= last_known.as_of and km < last_known.km


def average_annual_km(
    last_km: int,
    first_record_date: Optional[datetime.date],
    today: datetime.date,
) -> Optional[int]:
    """
    Media km annua: km attuali / (giorni dal primo evento / 365).

    Con meno di MIN_HISTORY_DAYS giorni di storico restituisce i km
    attuali; None se il veicolo non ha storico.
    """
    if first_record_date is None:
        return None

    days = (today - first_record_date).days
    if days < MIN_HISTORY_DAYS:
        return last_km

    return round(last_km / (days / 365))


def average_consumption(
    fuelings: Sequence[tuple[int, Decimal]],
) -> Optional[Decimal]:
    """
    Consumo medio in litri/100km.

    I rifornimenti sono ordinati per chilometraggio: i litri del primo
    rifornimento sono esclusi perché riferiti a km precedenti allo storico.

    Args:
        fuelings: Coppie (chilometraggio, litri)

    Returns:
        Consumo arrotondato a due decimali, None se non calcolabile
    """
    if len(fuelings) < 2:
        return None

    ordered = sorted(fuelings, key=lambda f: f[0])
    distance = ordered[-1][0] - ordered[0][0]
    if distance <= 0:
        return None

    liters = sum((Decimal(str(f[1])) for f in ordered[1:]), Decimal("0"))
    consumption = liters / Decimal(distance) * Decimal(100)
    return consumption.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
