from funeral_core.db.models.note import Note as NoteModel
from funeral_core.repositories.versioned import VersionedRepository

note_repo = VersionedRepository(NoteModel)
