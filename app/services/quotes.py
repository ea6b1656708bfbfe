"""Quote persistence and the bridge from stored quotes back to the calculator."""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.metrics import track_db_operation
from app.models.cover import Cover
from app.models.destination import Destination
from app.models.excess import Excess
from app.models.quote import Quote, QuoteDestination
from app.models.trip_type import TripType
from app.services.validation import ValidationResult
from app.utils.coercion import coerce_id, is_blank, parse_date, to_boolean

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("cruise", "snow", "snow_start_date", "snow_end_date", "cover_id")


class QuoteStoreError(Exception):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass
class QuoteDraft:
    """A quote being created, before it has a row.

    destination_ids is held here, apart from the quotes_to_destinations rows,
    until create_quote writes it out.
    """
    travellers: List[Dict[str, int]]
    start_date: date
    end_date: date
    trip_type_id: Optional[int]
    excess_id: Optional[int]
    cover_id: Optional[int] = None
    cruise: bool = False
    snow: bool = False
    snow_start_date: Optional[date] = None
    snow_end_date: Optional[date] = None
    destination_ids: List[Any] = field(default_factory=list)

    @classmethod
    def from_submission(cls, submission: Mapping[str, Any], validation: ValidationResult) -> "QuoteDraft":
        return cls(
            travellers=list(validation.travellers),
            start_date=parse_date(submission.get("start_date")),
            end_date=parse_date(submission.get("end_date")),
            trip_type_id=coerce_id(submission.get("trip_type_id")),
            excess_id=coerce_id(submission.get("excess_id")),
            cover_id=coerce_id(submission.get("cover_id")),
            cruise=to_boolean(submission.get("cruise")),
            snow=to_boolean(submission.get("snow")),
            snow_start_date=parse_date(submission.get("snow_start_date")),
            snow_end_date=parse_date(submission.get("snow_end_date")),
            destination_ids=list(validation.destination_ids),
        )


async def _exists(db: AsyncSession, model, record_id: Optional[int]) -> bool:
    if record_id is None:
        return False
    res = await db.execute(select(model.id).where(model.id == record_id))
    return res.scalars().first() is not None


async def _first_cover_id(db: AsyncSession) -> Optional[int]:
    res = await db.execute(select(Cover.id).order_by(Cover.id).limit(1))
    return res.scalars().first()


async def _check_references(db: AsyncSession, draft: QuoteDraft) -> List[str]:
    errors = []
    if not await _exists(db, TripType, draft.trip_type_id):
        errors.append("Trip type must exist")
    if not await _exists(db, Excess, draft.excess_id):
        errors.append("Excess must exist")
    if draft.cover_id is not None and not await _exists(db, Cover, draft.cover_id):
        errors.append("Cover must exist")

    pairs = [(raw, coerce_id(raw)) for raw in draft.destination_ids]
    known = set()
    wanted = [i for _, i in pairs if i is not None]
    if wanted:
        res = await db.execute(select(Destination.id).where(Destination.id.in_(wanted)))
        known = set(res.scalars().all())
    for raw, destination_id in pairs:
        if destination_id not in known:
            errors.append(f"Destination {raw} must exist")
    return errors


async def replace_destinations(db: AsyncSession, quote_id: int, destination_ids: List[int]) -> None:
    """Replace the quote's destination rows with exactly destination_ids."""
    await db.execute(delete(QuoteDestination).where(QuoteDestination.quote_id == quote_id))
    for destination_id in dict.fromkeys(destination_ids):
        db.add(QuoteDestination(quote_id=quote_id, destination_id=destination_id))
    await db.flush()


async def get_destination_ids(db: AsyncSession, quote_id: int) -> List[int]:
    res = await db.execute(
        select(QuoteDestination.destination_id)
        .where(QuoteDestination.quote_id == quote_id)
        .order_by(QuoteDestination.id)
    )
    return list(res.scalars().all())


async def get_quote(db: AsyncSession, quote_id: int) -> Optional[Quote]:
    res = await db.execute(select(Quote).where(Quote.id == quote_id))
    return res.scalars().first()


@track_db_operation("insert", "quotes")
async def create_quote(db: AsyncSession, draft: QuoteDraft) -> Quote:
    errors = await _check_references(db, draft)
    if errors:
        logger.info(f"Quote rejected by store: {errors}")
        raise QuoteStoreError(errors)

    cover_id = draft.cover_id if draft.cover_id is not None else await _first_cover_id(db)

    quote = Quote(
        travellers=draft.travellers,
        age=draft.travellers[0]["age"] if draft.travellers else None,
        start_date=draft.start_date,
        end_date=draft.end_date,
        trip_type_id=draft.trip_type_id,
        excess_id=draft.excess_id,
        cover_id=cover_id,
        cruise=draft.cruise,
        snow=draft.snow,
        snow_start_date=draft.snow_start_date,
        snow_end_date=draft.snow_end_date,
    )
    db.add(quote)
    await db.flush()

    await replace_destinations(db, quote.id, [coerce_id(i) for i in draft.destination_ids])
    await db.commit()
    await db.refresh(quote)

    logger.info(f"Quote {quote.id} created with {len(draft.travellers)} traveller(s)")
    return quote


def normalize_update(changes: Mapping[str, Any]) -> Dict[str, Any]:
    normalized = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS}
    for key in ("snow_start_date", "snow_end_date"):
        if key in normalized:
            normalized[key] = None if is_blank(normalized[key]) else parse_date(normalized[key])
    for key in ("cruise", "snow"):
        if key in normalized:
            normalized[key] = to_boolean(normalized[key])
    return normalized


@track_db_operation("update", "quotes")
async def update_quote(db: AsyncSession, quote: Quote, changes: Mapping[str, Any]) -> Quote:
    changes = normalize_update(changes)

    if changes.get("cover_id") is not None and not await _exists(db, Cover, changes["cover_id"]):
        raise QuoteStoreError(["Cover must exist"])

    for field_name, value in changes.items():
        setattr(quote, field_name, value)

    db.add(quote)
    await db.commit()
    await db.refresh(quote)
    return quote


def build_calculator_params(quote: Quote, destination_ids: List[int]) -> Dict[str, Any]:
    if quote.travellers and isinstance(quote.travellers, list):
        travellers = []
        for traveller in quote.travellers:
            age = traveller.get("age") if isinstance(traveller, dict) else None
            travellers.append({"age": quote.age if age is None else age})
    else:
        travellers = [{"age": quote.age}]

    return {
        "travellers": travellers,
        "start_date": quote.start_date,
        "end_date": quote.end_date,
        "destination_ids": destination_ids,
        "trip_type_id": quote.trip_type_id,
        "excess_id": quote.excess_id,
        "cruise": quote.cruise,
        "snow": quote.snow,
        "snow_start_date": quote.snow_start_date,
        "snow_end_date": quote.snow_end_date,
    }
