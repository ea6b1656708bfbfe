from sqlalchemy import Column, String, Float, Integer
from app.models.base import BaseModel

class Destination(BaseModel):
    __tablename__ = "destinations"
    label = Column(String(120), nullable=False)
    code = Column(String(20))
    zone = Column(Integer, nullable=False, index=True)
    multiplier = Column(Float, nullable=False, default=1.0)
    cruise_add_on_amount = Column(Float, nullable=False, default=0.0)
    ski_per_day_amount = Column(Float, nullable=True)
