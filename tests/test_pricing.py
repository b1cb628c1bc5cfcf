"""Unit tests for ride pricing and parking fees."""

import pytest

from parkride.domain.distance import haversine_km
from parkride.domain.entities import GeoPoint
from parkride.domain.enums import RideVehicleType
from parkride.domain.pricing import (
    FALLBACK_RATE_PER_KM,
    PerKilometrePricing,
    PricingEngine,
    parking_fee,
)
from tests.support import at

DOWNTOWN = GeoPoint(longitude=-122.4194, latitude=37.7749)
SFO = GeoPoint(longitude=-122.3890, latitude=37.6213)


class TestPerKilometrePricing:
    @pytest.mark.parametrize(
        "vehicle, expected",
        [("Sedan", 25.0), ("SUV", 35.0), ("Luxury", 50.0), ("Van", 40.0)],
    )
    def test_default_rates(self, vehicle, expected):
        assert PerKilometrePricing().calculate(10.0, vehicle) == expected

    def test_unknown_type_uses_fallback(self):
        assert PerKilometrePricing().rate_for("Rickshaw") == FALLBACK_RATE_PER_KM

    def test_enum_member_accepted(self):
        assert PerKilometrePricing().rate_for(RideVehicleType.SUV) == 3.5

    def test_rounds_to_cents(self):
        assert PerKilometrePricing().calculate(3.332, "Sedan") == 8.33

    def test_custom_rate_table(self):
        strategy = PerKilometrePricing({"Sedan": 1.0})
        assert strategy.calculate(10.0, "Sedan") == 10.0
        assert strategy.calculate(10.0, "SUV") == 25.0


class TestPricingEngine:
    def test_quote_combines_distance_and_rate(self):
        quote = PricingEngine().quote(DOWNTOWN, SFO, "Sedan")
        assert quote.distance_km == pytest.approx(17.3, abs=0.2)
        assert quote.price == round(quote.distance_km * 2.5, 2)

    def test_zero_distance_is_free(self):
        quote = PricingEngine().quote(SFO, SFO, "Luxury")
        assert quote.distance_km == 0.0
        assert quote.price == 0.0


class TestDistance:
    def test_symmetric(self):
        assert haversine_km(DOWNTOWN, SFO) == pytest.approx(haversine_km(SFO, DOWNTOWN))

    def test_one_km_north(self):
        nearby = GeoPoint(longitude=-122.4194, latitude=37.7840)
        assert haversine_km(DOWNTOWN, nearby) == pytest.approx(1.01, abs=0.02)


class TestParkingFee:
    def test_hourly_fee(self):
        assert parking_fee(30.0, at(10), at(12, 30)) == 75.0

    def test_negative_duration_is_free(self):
        assert parking_fee(30.0, at(12), at(10)) == 0.0
