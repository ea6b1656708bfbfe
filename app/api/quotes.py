"""Quote endpoints: create, show, update, and an unsaved premium preview"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.quote import Quote
from app.schemas.quote import QuoteCreate, QuoteUpdate, QuoteOut, PremiumsOut
from app.services.pricing import PremiumCalculator
from app.services.reference_data import load_reference_data
from app.services.validation import validate_quote
from app.services import quotes as quote_store
from app.core.enums import CalculationOutcome
from app.core.http_errors import check_not_found, raise_unprocessable
from app.core.metrics import premium_calculations, quote_validation_failures, quotes_created
from app.core.response_builders import build_premiums_response, build_quote_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def _calculate(calculator: PremiumCalculator):
    premiums = calculator.calculate_premiums()
    outcome = CalculationOutcome.COMPUTED if premiums else CalculationOutcome.EMPTY
    premium_calculations.labels(outcome=outcome.value).inc()
    return premiums


async def _render_quote(db: AsyncSession, quote: Quote) -> QuoteOut:
    reference = await load_reference_data(db)
    destination_ids = await quote_store.get_destination_ids(db, quote.id)
    calculator = PremiumCalculator(
        quote_store.build_calculator_params(quote, destination_ids),
        reference,
    )
    return build_quote_response(quote, destination_ids, calculator, _calculate(calculator))


@router.post("/calc", response_model=PremiumsOut)
async def calc_premiums(payload: QuoteCreate, db: AsyncSession = Depends(get_db)):
    reference = await load_reference_data(db)
    calculator = PremiumCalculator(payload.model_dump(), reference)
    return build_premiums_response(calculator, _calculate(calculator))


@router.post("/", response_model=QuoteOut)
async def create_quote(payload: QuoteCreate, db: AsyncSession = Depends(get_db)):
    submission = payload.model_dump()

    result = validate_quote(submission)
    if not result.valid:
        quote_validation_failures.inc()
        logger.info(f"Quote submission rejected: {result.errors}")
        raise_unprocessable(result.errors)

    draft = quote_store.QuoteDraft.from_submission(submission, result)
    try:
        quote = await quote_store.create_quote(db, draft)
    except quote_store.QuoteStoreError as e:
        await db.rollback()
        raise_unprocessable(e.errors)

    quotes_created.inc()
    return await _render_quote(db, quote)


@router.get("/{quote_id}", response_model=QuoteOut)
async def get_quote(quote_id: int, db: AsyncSession = Depends(get_db)):
    quote = await quote_store.get_quote(db, quote_id)
    check_not_found(quote, "Quote", quote_id)

    return await _render_quote(db, quote)


@router.put("/{quote_id}", response_model=QuoteOut)
async def update_quote(quote_id: int, payload: QuoteUpdate, db: AsyncSession = Depends(get_db)):
    quote = await quote_store.get_quote(db, quote_id)
    check_not_found(quote, "Quote", quote_id)

    try:
        quote = await quote_store.update_quote(db, quote, payload.model_dump(exclude_unset=True))
    except quote_store.QuoteStoreError as e:
        await db.rollback()
        raise_unprocessable(e.errors)

    return await _render_quote(db, quote)
