from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from funeral_core.api.deps import get_actor, get_db
from funeral_core.schemas.note import Note, NoteCreate, NoteUpdate
from funeral_core.schemas.pagination import PaginatedResponse
from funeral_core.services.note import create_note, delete_note, edit_note, list_notes, notes

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("", response_model=Note, status_code=status.HTTP_201_CREATED)
def create_new_note(
    note_data: NoteCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    note = create_note(db, actor=actor, **note_data.model_dump())
    return Note.model_validate(note)


@router.get("", response_model=PaginatedResponse[Note])
def get_current_notes(
    tenant_id: str = Query(..., min_length=1),
    case: str | None = Query(None, description="Filter notes by case business key"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    db: Session = Depends(get_db),
):
    items, total = list_notes(
        db, tenant_id, case_business_key=case, page=page, page_size=page_size
    )
    return PaginatedResponse(
        items=[Note.model_validate(note) for note in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/versions/{version_id}", response_model=Note)
def get_note_version(version_id: int, db: Session = Depends(get_db)):
    return Note.model_validate(notes.get_by_id(db, version_id))


@router.get("/{business_key}", response_model=Note)
def get_note(business_key: str, db: Session = Depends(get_db)):
    return Note.model_validate(notes.get_current(db, business_key))


@router.get("/{business_key}/history", response_model=list[Note])
def get_note_history(business_key: str, db: Session = Depends(get_db)):
    return [Note.model_validate(note) for note in notes.get_history(db, business_key)]


@router.get("/{business_key}/as-of", response_model=Note)
def get_note_as_of(
    business_key: str,
    at: datetime = Query(..., description="Instant to reconstruct (ISO 8601)"),
    db: Session = Depends(get_db),
):
    return Note.model_validate(notes.get_as_of(db, business_key, at))


@router.put("/{business_key}", response_model=Note)
def edit_note_by_key(
    business_key: str,
    note_data: NoteUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Edit a note's content. The previous text stays in the note's history."""
    note = edit_note(
        db,
        business_key,
        actor=actor,
        content=note_data.content,
        expected_version=note_data.expected_version,
    )
    return Note.model_validate(note)


@router.delete("/{business_key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note_by_key(
    business_key: str,
    expected_version: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    delete_note(db, business_key, actor=actor, expected_version=expected_version)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
