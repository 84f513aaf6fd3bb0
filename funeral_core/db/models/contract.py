from sqlalchemy import Column, Integer, String, Text

from funeral_core.db.base import Base
from funeral_core.db.models.versioned import VersionedMixin


class Contract(VersionedMixin, Base):
    __tablename__ = "contracts"
    __payload_fields__ = ("case_business_key", "status", "total_amount", "terms")

    case_business_key = Column(String(64), nullable=False, index=True)
    status = Column(String(32), nullable=False)
    total_amount = Column(Integer, nullable=False, default=0)
    terms = Column(Text, nullable=True)
