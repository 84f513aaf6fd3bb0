from sqlalchemy import Column, String, Text

from funeral_core.db.base import Base
from funeral_core.db.models.versioned import VersionedMixin


class Note(VersionedMixin, Base):
    __tablename__ = "notes"
    __payload_fields__ = ("case_business_key", "content")

    case_business_key = Column(String(64), nullable=False, index=True)
    content = Column(Text, nullable=False)
