# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    AccessRequestStatus,
    AuditAction,
    PolicyVerificationStatus,
    SubmissionStatus,
    SubmissionType,
    UserRole,
)
from .models import (
    AccessRequest,
    AttorneyClientAccess,
    AuditLog,
    Beneficiary,
    Client,
    ClientInvite,
    Document,
    ImmutableRowViolation,
    Insurer,
    Policy,
    PolicyBeneficiary,
    Receipt,
    Submission,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "AccessRequestStatus",
    "AuditAction",
    "PolicyVerificationStatus",
    "SubmissionStatus",
    "SubmissionType",
    "UserRole",
    # Models
    "AccessRequest",
    "AttorneyClientAccess",
    "AuditLog",
    "Beneficiary",
    "Client",
    "ClientInvite",
    "Document",
    "ImmutableRowViolation",
    "Insurer",
    "Policy",
    "PolicyBeneficiary",
    "Receipt",
    "Submission",
]
