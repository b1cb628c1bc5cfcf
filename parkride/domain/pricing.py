"""
Pricing  (Strategy Pattern)
===========================

Ride fare
---------
Price = round(Distance_km x Rate_Per_KM[vehicle_type], 2)

Rates default to Sedan 2.5, SUV 3.5, Luxury 5.0, Van 4.0 per km; unknown
vehicle types fall back to the Sedan rate.

Parking fee
-----------
Fee = round(Price_Per_Hour x Duration_hours, 2), duration floored at zero.

Complexity: O(1) per calculation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from .distance import haversine_km
from .entities import GeoPoint
from .enums import RideVehicleType

DEFAULT_RATES_PER_KM: dict[str, float] = {
    RideVehicleType.SEDAN.value: 2.5,
    RideVehicleType.SUV.value: 3.5,
    RideVehicleType.LUXURY.value: 5.0,
    RideVehicleType.VAN.value: 4.0,
}
FALLBACK_RATE_PER_KM = 2.5


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def calculate(self, distance_km: float, vehicle_type: str) -> float: ...


class PerKilometrePricing(PricingStrategy):
    def __init__(
        self,
        rates: Optional[Mapping[str, float]] = None,
        fallback_rate: float = FALLBACK_RATE_PER_KM,
    ):
        self.rates = dict(rates if rates is not None else DEFAULT_RATES_PER_KM)
        self.fallback_rate = fallback_rate

    def rate_for(self, vehicle_type: str) -> float:
        key = vehicle_type.value if isinstance(vehicle_type, RideVehicleType) else vehicle_type
        return self.rates.get(key, self.fallback_rate)

    def calculate(self, distance_km: float, vehicle_type: str) -> float:
        return round(distance_km * self.rate_for(vehicle_type), 2)


# ── Engine facade ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class RideQuote:
    distance_km: float
    price: float


class PricingEngine:
    """High-level API used by the ride endpoints."""

    def __init__(self, strategy: Optional[PricingStrategy] = None):
        self.strategy = strategy or PerKilometrePricing()

    def quote(
        self, origin: GeoPoint, destination: GeoPoint, vehicle_type: str
    ) -> RideQuote:
        distance = haversine_km(origin, destination)
        return RideQuote(
            distance_km=distance,
            price=self.strategy.calculate(distance, vehicle_type),
        )


def parking_fee(price_per_hour: float, start_time: datetime, end_time: datetime) -> float:
    hours = max((end_time - start_time).total_seconds(), 0.0) / 3600
    return round(price_per_hour * hours, 2)
