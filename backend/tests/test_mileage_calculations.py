"""
Test per i calcoli puri sul chilometraggio.

Nessun accesso al database: scelta dell'ultimo valore noto, regressione,
media annua e consumo medio.
"""

from datetime import date
from decimal import Decimal

from app.schemas.mileage import LastKnownMileage, MileageReading, MileageSource
from app.services.mileage_calculations import (
    average_annual_km,
    average_consumption,
    is_regression,
    pick_last_known,
)


# ============================================================
# Ultimo chilometraggio noto
# ============================================================


class TestPickLastKnown:
    """Test per la scelta dell'ultimo chilometraggio tra i flussi."""

    def test_no_readings(self):
        """Senza letture il valore noto è 0 senza data."""
        result = pick_last_known([None, None, None, None])

        assert result.km == 0
        assert result.as_of is None
        assert result.source is None

    def test_latest_date_wins(self):
        """Vince la data più recente anche con km inferiori."""
        result = pick_last_known([
            MileageReading(km=12000, date=date(2024, 1, 5), source=MileageSource.FUELING),
            MileageReading(km=11000, date=date(2024, 2, 1), source=MileageSource.TRIP_LOG),
        ])

        assert result.km == 11000
        assert result.as_of == date(2024, 2, 1)
        assert result.source == MileageSource.TRIP_LOG

    def test_same_date_highest_km_wins(self):
        """A parità di data vince il chilometraggio più alto."""
        result = pick_last_known([
            MileageReading(km=10000, date=date(2024, 1, 10), source=MileageSource.TRIP_LOG),
            MileageReading(km=10250, date=date(2024, 1, 10), source=MileageSource.MILEAGE_CHECK),
            None,
        ])

        assert result.km == 10250
        assert result.source == MileageSource.MILEAGE_CHECK


class TestIsRegression:
    """Test per la verifica di regressione."""

    last_known = LastKnownMileage(km=10000, as_of=date(2024, 1, 10), source=MileageSource.TRIP_LOG)

    def test_lower_km_same_day_is_regression(self):
        assert is_regression(self.last_known, date(2024, 1, 10), 9500) is True

    def test_lower_km_later_is_regression(self):
        assert is_regression(self.last_known, date(2024, 3, 1), 9999) is True

    def test_equal_km_is_accepted(self):
        assert is_regression(self.last_known, date(2024, 1, 10), 10000) is False

    def test_backdated_reading_is_not_checked(self):
        """Una lettura retrodatata non viene confrontata."""
        assert is_regression(self.last_known, date(2024, 1, 5), 9500) is False

    def test_empty_history(self):
        empty = LastKnownMileage(km=0, as_of=None, source=None)
        assert is_regression(empty, date(2024, 1, 1), 0) is False


# ============================================================
# Statistiche
# ============================================================


class TestAverageAnnualKm:
    """Test per la media km annua."""

    def test_no_history(self):
        assert average_annual_km(0, None, date(2024, 6, 1)) is None

    def test_short_history_returns_current_km(self):
        """Con meno di 30 giorni di storico la media coincide con i km attuali."""
        assert average_annual_km(1200, date(2024, 5, 20), date(2024, 6, 1)) == 1200

    def test_one_year_history(self):
        assert average_annual_km(20000, date(2023, 1, 1), date(2024, 1, 1)) == 20000

    def test_two_years_history(self):
        """730 giorni: metà dei km per anno."""
        assert average_annual_km(30000, date(2022, 1, 1), date(2024, 1, 1)) == 15000


class TestAverageConsumption:
    """Test per il consumo medio in litri/100km."""

    def test_needs_two_fuelings(self):
        assert average_consumption([]) is None
        assert average_consumption([(10000, Decimal("40"))]) is None

    def test_first_fueling_liters_excluded(self):
        """I litri del primo rifornimento non entrano nel calcolo."""
        result = average_consumption([
            (10000, Decimal("50.00")),
            (11000, Decimal("60.00")),
        ])

        assert result == Decimal("6.00")

    def test_unordered_input(self):
        """I rifornimenti vengono ordinati per chilometraggio."""
        result = average_consumption([
            (12000, Decimal("45.00")),
            (10000, Decimal("99.00")),
            (11000, Decimal("40.00")),
        ])

        # (40 + 45) / 2000 * 100
        assert result == Decimal("4.25")

    def test_rounding(self):
        result = average_consumption([
            (10000, Decimal("10.00")),
            (10300, Decimal("20.00")),
        ])

        assert result == Decimal("6.67")

    def test_no_distance(self):
        result = average_consumption([
            (10000, Decimal("10.00")),
            (10000, Decimal("20.00")),
        ])

        assert result is None
