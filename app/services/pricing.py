"""Travel premium rules engine.

Every cover tier is priced from the same multiplicative rate chain:

    base x excess x age bracket x duration bracket x destination x trip type x cover

summed over travellers, plus flat cruise and snow add-ons that the cover
multiplier does not touch. The calculator is lenient: it accepts the raw
fields of an unvalidated or previously saved quote, prices any traveller with
a missing lookup at zero and returns no premiums at all when the quote is not
computable.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional

from app.schemas.quote import PremiumBreakdown
from app.services.reference_data import DestinationRate, Rate, ReferenceData
from app.utils.coercion import as_list, is_blank, parse_date, to_boolean, to_int

MIN_AGE = 1
MAX_AGE = 84
ADULT_AGE = 21
CHILD_AGE = 16
MAX_TRIP_DURATION_YEARS = 2
MAX_ADVANCE_BOOKING_MONTHS = 18

CENTS = Decimal("0.01")


def round_money(value: float) -> float:
    return float(Decimal(repr(value)).quantize(CENTS, rounding=ROUND_HALF_UP))


class PremiumCalculator:

    def __init__(self, params: Mapping[str, Any], reference: ReferenceData):
        self.reference = reference
        self.travellers = self._records(params.get("travellers"))
        self.start_date = parse_date(params.get("start_date"))
        self.end_date = parse_date(params.get("end_date"))
        self.destination_ids = [i for i in as_list(params.get("destination_ids")) if not is_blank(i)]
        self.trip_type_id = params.get("trip_type_id")
        self.excess_id = params.get("excess_id")
        self.cruise = to_boolean(params.get("cruise"))
        self.snow = to_boolean(params.get("snow"))
        self.snow_start_date = parse_date(params.get("snow_start_date"))
        self.snow_end_date = parse_date(params.get("snow_end_date"))

    def calculate_premiums(self) -> Dict[int, PremiumBreakdown]:
        """Premium per cover id; an empty dict means the quote cannot be priced."""
        if self._invalid_inputs():
            return {}

        base_multiplier = self.reference.base_multiplier
        if base_multiplier is None:
            return {}

        return {
            cover.id: self._calculate_for_cover(cover, base_multiplier)
            for cover in self.reference.covers
        }

    def highest_zone_destination(self) -> Optional[DestinationRate]:
        if not self.destination_ids:
            return None
        destinations = self.reference.destinations_by_zone(self.destination_ids)
        return destinations[0] if destinations else None

    def trip_duration_days(self) -> int:
        if not (self.start_date and self.end_date):
            return 0
        return (self.end_date - self.start_date).days + 1

    def _invalid_inputs(self) -> bool:
        return (
            not self.travellers
            or self.start_date is None
            or self.end_date is None
            or not self.destination_ids
            or is_blank(self.trip_type_id)
            or is_blank(self.excess_id)
        )

    def _calculate_for_cover(self, cover: Rate, base_multiplier: float) -> PremiumBreakdown:
        total_base = sum(
            self._traveller_premium(traveller, cover, base_multiplier)
            for traveller in self.travellers
        )
        cruise_add_on = self._cruise_add_on()
        snow_add_on = self._snow_add_on()
        final_premium = total_base + cruise_add_on + snow_add_on

        return PremiumBreakdown(
            base_premium=round_money(total_base),
            cruise_add_on=round_money(cruise_add_on),
            snow_add_on=round_money(snow_add_on),
            final_premium=round_money(final_premium),
        )

    def _traveller_premium(self, traveller: Mapping[str, Any], cover: Rate, base_multiplier: float) -> float:
        age_bracket = self.reference.age_bracket(to_int(traveller.get("age")))
        if age_bracket is None:
            return 0.0

        duration_bracket = self.reference.duration_bracket(self.trip_duration_days())
        if duration_bracket is None:
            return 0.0

        destination = self.highest_zone_destination()
        if destination is None:
            return 0.0

        trip_type = self.reference.trip_type(self.trip_type_id)
        if trip_type is None:
            return 0.0

        excess = self.reference.excess(self.excess_id)
        if excess is None:
            return 0.0

        return (
            base_multiplier
            * excess.multiplier
            * age_bracket.multiplier
            * duration_bracket.multiplier
            * destination.multiplier
            * trip_type.multiplier
            * cover.multiplier
        )

    def _cruise_add_on(self) -> float:
        if not self.cruise:
            return 0.0

        destination = self.highest_zone_destination()
        if destination is None:
            return 0.0

        return destination.cruise_add_on_amount * len(self.travellers)

    def _snow_add_on(self) -> float:
        if not self.snow:
            return 0.0
        if not (self.snow_start_date and self.snow_end_date):
            return 0.0

        destination = self.highest_zone_destination()
        if destination is None or destination.ski_per_day_amount is None:
            return 0.0

        snow_days = (self.snow_end_date - self.snow_start_date).days + 1
        if snow_days <= 0:
            return 0.0

        return destination.ski_per_day_amount * snow_days * len(self.travellers)

    @staticmethod
    def _records(travellers: Any) -> List[Mapping[str, Any]]:
        if isinstance(travellers, Mapping):
            travellers = list(travellers.values())
        if not isinstance(travellers, (list, tuple)):
            return []
        return [t if isinstance(t, Mapping) else {"age": t} for t in travellers if t is not None]
