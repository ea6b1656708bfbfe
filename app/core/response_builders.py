from typing import Dict, List, Optional
from app.models.quote import Quote
from app.schemas.quote import (
    DestinationOut,
    FormDataOut,
    PremiumBreakdown,
    PremiumsOut,
    QuoteOut,
    RateOut,
    TravellerOut,
)
from app.services.pricing import PremiumCalculator
from app.services.reference_data import DestinationRate, Rate, ReferenceData
from app.utils.coercion import to_int


def build_rate_response(rate: Rate) -> RateOut:
    return RateOut(id=rate.id, label=rate.label, multiplier=rate.multiplier)


def build_destination_response(destination: Optional[DestinationRate]) -> Optional[DestinationOut]:
    if destination is None:
        return None
    return DestinationOut(
        id=destination.id,
        label=destination.label,
        code=destination.code,
        zone=destination.zone,
        multiplier=destination.multiplier,
        cruise_add_on_amount=destination.cruise_add_on_amount,
        ski_per_day_amount=destination.ski_per_day_amount,
    )


def build_premiums_response(
    calculator: PremiumCalculator,
    premiums: Dict[int, PremiumBreakdown],
) -> PremiumsOut:
    return PremiumsOut(
        premiums=premiums,
        trip_duration_days=calculator.trip_duration_days(),
        highest_zone_destination=build_destination_response(calculator.highest_zone_destination()),
    )


def build_quote_response(
    quote: Quote,
    destination_ids: List[int],
    calculator: PremiumCalculator,
    premiums: Dict[int, PremiumBreakdown],
) -> QuoteOut:
    return QuoteOut(
        id=quote.id,
        travellers=[TravellerOut(age=to_int(t.get("age"))) for t in calculator.travellers],
        start_date=quote.start_date,
        end_date=quote.end_date,
        destination_ids=destination_ids,
        trip_type_id=quote.trip_type_id,
        excess_id=quote.excess_id,
        cover_id=quote.cover_id,
        cruise=quote.cruise,
        snow=quote.snow,
        snow_start_date=quote.snow_start_date,
        snow_end_date=quote.snow_end_date,
        covers=[build_rate_response(c) for c in calculator.reference.covers],
        premiums=premiums,
        trip_duration_days=calculator.trip_duration_days(),
        highest_zone_destination=build_destination_response(calculator.highest_zone_destination()),
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def build_form_data_response(reference: ReferenceData) -> FormDataOut:
    options = reference.form_options()
    return FormDataOut(
        trip_types=[build_rate_response(r) for r in options["trip_types"]],
        excesses=[build_rate_response(r) for r in options["excesses"]],
        destinations=[build_destination_response(d) for d in options["destinations"]],
    )
