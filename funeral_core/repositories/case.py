from funeral_core.db.models.case import Case as CaseModel
from funeral_core.repositories.versioned import VersionedRepository

case_repo = VersionedRepository(CaseModel)
