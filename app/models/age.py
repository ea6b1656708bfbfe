from sqlalchemy import Column, Float, Integer
from app.models.base import BaseModel

class AgeBracket(BaseModel):
    __tablename__ = "ages"
    age_minimum = Column(Integer, nullable=False)
    age_maximum = Column(Integer, nullable=False)
    multiplier = Column(Float, nullable=False, default=1.0)
