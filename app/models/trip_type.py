from sqlalchemy import Column, String, Float
from app.models.base import BaseModel

class TripType(BaseModel):
    __tablename__ = "trip_types"
    label = Column(String(120), nullable=False)
    multiplier = Column(Float, nullable=False, default=1.0)
