from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.quote import FormDataOut
from app.services.reference_data import load_reference_data
from app.core.response_builders import build_form_data_response

router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/form-data", response_model=FormDataOut)
async def form_data(db: AsyncSession = Depends(get_db)):
    """Options for building a quote form"""
    reference = await load_reference_data(db)
    return build_form_data_response(reference)
