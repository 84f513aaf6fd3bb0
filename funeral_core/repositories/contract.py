from funeral_core.db.models.contract import Contract as ContractModel
from funeral_core.repositories.versioned import VersionedRepository

contract_repo = VersionedRepository(ContractModel)
