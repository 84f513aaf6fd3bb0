from funeral_core.db.models.case import Case
from funeral_core.db.models.contract import Contract
from funeral_core.db.models.note import Note
from funeral_core.db.models.policy import ContactManagementPolicy, PaymentManagementPolicy

__all__ = ["Case", "Contract", "Note", "ContactManagementPolicy", "PaymentManagementPolicy"]
