from sqlalchemy import Column, String, Float
from app.models.base import BaseModel
from app.core.enums import PremiumType

class Premium(BaseModel):
    __tablename__ = "premia"
    label = Column(String(120), nullable=False)
    premium_type = Column(String(20), nullable=False, default=PremiumType.BASE.value, index=True)
    multiplier = Column(Float, nullable=False)
