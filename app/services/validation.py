"""Business-rule validation of raw quote submissions.

Unlike the calculator, validation is strict: every rule runs, every violation
is reported, and the messages come back in a fixed order (travellers, dates,
destinations, required fields) for the customer to correct.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from dateutil.relativedelta import relativedelta

from app.services.pricing import (
    ADULT_AGE,
    CHILD_AGE,
    MAX_ADVANCE_BOOKING_MONTHS,
    MAX_AGE,
    MAX_TRIP_DURATION_YEARS,
    MIN_AGE,
)
from app.utils.coercion import as_list, is_blank, parse_date, to_int


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    travellers: List[Dict[str, int]] = field(default_factory=list)
    destination_ids: List[Any] = field(default_factory=list)


def validate_quote(submission: Mapping[str, Any], today: Optional[date] = None) -> ValidationResult:
    today = today or date.today()
    errors: List[str] = []
    accepted: List[Dict[str, int]] = []

    travellers = normalize_travellers(submission.get("travellers"))
    _validate_travellers(travellers, errors, accepted)
    _validate_dates(submission.get("start_date"), submission.get("end_date"), today, errors)
    _validate_destinations(submission.get("destination_ids"), errors)
    _validate_required_fields(submission, errors)

    if errors:
        return ValidationResult(valid=False, errors=errors)

    destination_ids = [i for i in as_list(submission.get("destination_ids")) if not is_blank(i)]
    return ValidationResult(valid=True, travellers=accepted, destination_ids=destination_ids)


def normalize_travellers(travellers: Any) -> List[Any]:
    """Flatten a map-of-records or sequence-of-records, dropping entries without an age."""
    if isinstance(travellers, Mapping):
        travellers = list(travellers.values())
    elif not isinstance(travellers, (list, tuple)):
        travellers = []

    kept = []
    for traveller in travellers:
        if traveller is None:
            continue
        if isinstance(traveller, Mapping):
            if is_blank(traveller.get("age")):
                continue
        elif is_blank(traveller):
            continue
        kept.append(traveller)
    return kept


def traveller_age(traveller: Any) -> int:
    if not isinstance(traveller, Mapping):
        return 0
    return to_int(traveller.get("age"))


def _validate_travellers(travellers: List[Any], errors: List[str], accepted: List[Dict[str, int]]) -> None:
    if not travellers:
        errors.append("At least one traveller is required.")

    # out-of-range travellers still count as the accompanying adult
    has_adult = any(traveller_age(t) >= ADULT_AGE for t in travellers)

    for index, traveller in enumerate(travellers, start=1):
        age = traveller_age(traveller)
        in_range = MIN_AGE <= age <= MAX_AGE

        if not in_range:
            errors.append(f"Traveller {index}: Age must be between {MIN_AGE} and {MAX_AGE}.")
        if age < CHILD_AGE and not has_adult:
            errors.append(
                f"Traveller {index}: Children under {CHILD_AGE} must travel with an adult ({ADULT_AGE}+)."
            )
        if in_range:
            accepted.append({"age": age})


def _validate_dates(start_raw: Any, end_raw: Any, today: date, errors: List[str]) -> None:
    start_date = parse_date(start_raw)
    end_date = parse_date(end_raw)

    if start_date is None or end_date is None:
        errors.append("Start date and end date are required.")
        return

    if end_date < start_date:
        errors.append("End date must be after start date.")
    if start_date < today:
        errors.append("Start date cannot be in the past.")
    if start_date > today + relativedelta(months=MAX_ADVANCE_BOOKING_MONTHS):
        errors.append(f"Start date cannot be more than {MAX_ADVANCE_BOOKING_MONTHS} months in advance.")
    if (end_date - start_date).days > MAX_TRIP_DURATION_YEARS * 365:
        errors.append(f"Trip duration cannot exceed {MAX_TRIP_DURATION_YEARS} years.")


def _validate_destinations(destination_ids: Any, errors: List[str]) -> None:
    if all(is_blank(i) for i in as_list(destination_ids)):
        errors.append("At least one destination must be selected.")


def _validate_required_fields(submission: Mapping[str, Any], errors: List[str]) -> None:
    if is_blank(submission.get("trip_type_id")):
        errors.append("Trip type is required.")
    if is_blank(submission.get("excess_id")):
        errors.append("Excess is required.")
