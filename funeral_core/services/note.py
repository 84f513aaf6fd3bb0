from sqlalchemy.orm import Session

from funeral_core.db.models.note import Note as NoteModel
from funeral_core.domain.validators import validate_note
from funeral_core.errors import DomainValidationError
from funeral_core.repositories.note import note_repo
from funeral_core.services.case import cases
from funeral_core.services.versioning import VersionLifecycleManager

notes = VersionLifecycleManager(note_repo, validate_note, entity_name="Note")


def create_note(
    db: Session,
    tenant_id: str,
    actor: str,
    case_business_key: str,
    content: str,
    business_key: str | None = None,
) -> NoteModel:
    """Attach a new internal note to a current case of the same tenant."""
    case = cases.get_current(db, case_business_key)
    if case.tenant_id != tenant_id:
        raise DomainValidationError(
            f"Case {case_business_key} does not belong to tenant {tenant_id}"
        )
    payload = {"case_business_key": case_business_key, "content": content}
    return notes.create_initial(db, tenant_id, payload, actor, business_key=business_key)


def edit_note(
    db: Session,
    business_key: str,
    actor: str,
    content: str,
    expected_version: int | None = None,
) -> NoteModel:
    """Notes only ever change their content; the case link is fixed."""
    return notes.create_new_version(
        db, business_key, {"content": content}, actor, expected_version=expected_version
    )


def delete_note(
    db: Session, business_key: str, actor: str, expected_version: int | None = None
) -> None:
    notes.soft_delete(db, business_key, actor, expected_version=expected_version)


def list_notes(
    db: Session,
    tenant_id: str,
    case_business_key: str | None = None,
    page: int = 1,
    page_size: int = 100,
) -> tuple[list[NoteModel], int]:
    criteria = []
    if case_business_key is not None:
        criteria.append(NoteModel.case_business_key == case_business_key)
    return notes.list_current(db, tenant_id, *criteria, page=page, page_size=page_size)
