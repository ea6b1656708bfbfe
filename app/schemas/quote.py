from pydantic import BaseModel
from typing import Any, Dict, List, Optional, Union
from datetime import date, datetime

RawId = Union[int, str]
RawFlag = Union[bool, int, str]


class QuoteCreate(BaseModel):
    """Raw quote submission. Fields are loosely typed; validate_quote decides what is acceptable."""
    travellers: Union[Dict[str, Any], List[Any], None] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    destination_ids: Optional[List[Optional[RawId]]] = None
    trip_type_id: Optional[RawId] = None
    excess_id: Optional[RawId] = None
    cover_id: Optional[RawId] = None
    cruise: Optional[RawFlag] = False
    snow: Optional[RawFlag] = False
    snow_start_date: Optional[str] = None
    snow_end_date: Optional[str] = None


class QuoteUpdate(BaseModel):
    cruise: Optional[bool] = None
    snow: Optional[bool] = None
    snow_start_date: Optional[str] = None
    snow_end_date: Optional[str] = None
    cover_id: Optional[int] = None


class PremiumBreakdown(BaseModel):
    base_premium: float
    cruise_add_on: float
    snow_add_on: float
    final_premium: float


class TravellerOut(BaseModel):
    age: int


class RateOut(BaseModel):
    id: int
    label: str
    multiplier: float


class DestinationOut(BaseModel):
    id: int
    label: str
    code: Optional[str] = None
    zone: int
    multiplier: float
    cruise_add_on_amount: float
    ski_per_day_amount: Optional[float] = None


class PremiumsOut(BaseModel):
    premiums: Dict[int, PremiumBreakdown]
    trip_duration_days: int
    highest_zone_destination: Optional[DestinationOut] = None


class QuoteOut(PremiumsOut):
    id: int
    travellers: List[TravellerOut]
    start_date: date
    end_date: date
    destination_ids: List[int]
    trip_type_id: int
    excess_id: int
    cover_id: Optional[int] = None
    cruise: bool
    snow: bool
    snow_start_date: Optional[date] = None
    snow_end_date: Optional[date] = None
    covers: List[RateOut]
    created_at: datetime
    updated_at: Optional[datetime] = None


class FormDataOut(BaseModel):
    trip_types: List[RateOut]
    excesses: List[RateOut]
    destinations: List[DestinationOut]
