from sqlalchemy import Column, Date, Integer, String

from funeral_core.db.base import Base
from funeral_core.db.models.versioned import VersionedMixin


class Case(VersionedMixin, Base):
    __tablename__ = "cases"
    __payload_fields__ = ("decedent_name", "case_type", "status", "service_date", "amount")

    decedent_name = Column(String(255), nullable=False)
    case_type = Column(String(32), nullable=False)
    status = Column(String(32), nullable=False)
    service_date = Column(Date, nullable=True)
    # Integer cents
    amount = Column(Integer, nullable=False, default=0)
