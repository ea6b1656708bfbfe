from sqlalchemy import Column, String, Float
from app.models.base import BaseModel

class Excess(BaseModel):
    __tablename__ = "excesses"
    label = Column(String(120), nullable=False)
    amount = Column(Float, nullable=True)
    multiplier = Column(Float, nullable=False, default=1.0)
