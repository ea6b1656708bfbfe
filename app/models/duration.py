from sqlalchemy import Column, Float, Integer
from app.models.base import BaseModel

class DurationBracket(BaseModel):
    __tablename__ = "durations"
    minimum_days = Column(Integer, nullable=False)
    maximum_days = Column(Integer, nullable=False)
    multiplier = Column(Float, nullable=False, default=1.0)
