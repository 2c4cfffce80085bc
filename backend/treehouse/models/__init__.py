from treehouse.models.user import User
from treehouse.models.member import Member
from treehouse.models.program import Program
from treehouse.models.attendee import Attendee
from treehouse.models.checkout import Checkout
from treehouse.models.donation import Donation
from treehouse.models.import_history import ImportHistory, ImportSource, ImportStatus, ImportType
from treehouse.models.audit import AuditLog

__all__ = [
    "User",
    "Member",
    "Program",
    "Attendee",
    "Checkout",
    "Donation",
    "ImportHistory", "ImportSource", "ImportStatus", "ImportType",
    "AuditLog",
]
