from pydantic import BaseModel, Field

from funeral_core.domain.validators import MAX_NOTE_LENGTH
from funeral_core.schemas.versioned import VersionedRecord, VersionedUpdate


class Note(VersionedRecord):
    case_business_key: str
    content: str


class NoteCreate(BaseModel):
    tenant_id: str = Field(..., min_length=1, max_length=64)
    business_key: str | None = Field(None, min_length=1, max_length=64)
    case_business_key: str = Field(..., min_length=1, max_length=64)
    content: str = Field(..., min_length=1, max_length=MAX_NOTE_LENGTH)


class NoteUpdate(VersionedUpdate):
    content: str = Field(..., min_length=1, max_length=MAX_NOTE_LENGTH)
