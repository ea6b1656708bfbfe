from sqlalchemy import Column, Boolean, Date, ForeignKey, Integer, JSON, UniqueConstraint
from app.models.base import BaseModel


class Quote(BaseModel):
    __tablename__ = "quotes"

    trip_type_id = Column(ForeignKey("trip_types.id"), nullable=False)
    excess_id = Column(ForeignKey("excesses.id"), nullable=False)
    cover_id = Column(ForeignKey("covers.id"), nullable=True)

    age = Column(Integer, nullable=True)
    travellers = Column(JSON, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    cruise = Column(Boolean, nullable=False, default=False)
    snow = Column(Boolean, nullable=False, default=False)
    snow_start_date = Column(Date, nullable=True)
    snow_end_date = Column(Date, nullable=True)


class QuoteDestination(BaseModel):
    __tablename__ = "quotes_to_destinations"
    __table_args__ = (UniqueConstraint("quote_id", "destination_id"),)

    quote_id = Column(ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    destination_id = Column(ForeignKey("destinations.id"), nullable=False)
