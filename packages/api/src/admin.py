# This project was developed with assistance from AI tools.
"""
SQLAdmin configuration for database administration UI

Access the admin panel at: http://localhost:8000/admin

When AUTH_DISABLED=false, requires admin credentials via login form.
When AUTH_DISABLED=true, admin panel is open (dev mode).
"""

from db import (
    AccessRequest,
    AuditLog,
    Beneficiary,
    Client,
    ClientInvite,
    Document,
    Insurer,
    Policy,
    Receipt,
    Submission,
)
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from sqlalchemy import create_engine
from starlette.requests import Request
from starlette.responses import Response

from .core.config import settings

# SQLAdmin requires a sync engine; derive from the async DATABASE_URL
_sync_url = settings.DATABASE_URL.replace("+asyncpg", "")
engine = create_engine(_sync_url, echo=False)


class AdminAuth(AuthenticationBackend):
    """Session-based auth gate for SQLAdmin.

    When AUTH_DISABLED=true, authenticate() always returns True (dev mode).
    Otherwise, requires login with credentials from ADMIN_USER / ADMIN_PASSWORD env vars.
    """

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username")
        password = form.get("password")
        if username == settings.SQLADMIN_USER and password == settings.SQLADMIN_PASSWORD:
            request.session.update({"admin_authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> Response | bool:
        if settings.AUTH_DISABLED:
            return True
        return request.session.get("admin_authenticated", False)


class ClientAdmin(ModelView, model=Client):
    column_list = [
        Client.id,
        Client.first_name,
        Client.last_name,
        Client.email,
        Client.created_at,
    ]
    column_searchable_list = [Client.first_name, Client.last_name, Client.email]
    column_sortable_list = [Client.id, Client.last_name, Client.created_at]
    column_default_sort = [(Client.created_at, True)]
    # Identity fingerprint is derived; never edited by hand
    form_excluded_columns = [Client.client_fingerprint, Client.created_at, Client.updated_at]
    name = "Client"
    name_plural = "Clients"
    icon = "fa-solid fa-user"


class InsurerAdmin(ModelView, model=Insurer):
    column_list = [Insurer.id, Insurer.name, Insurer.contact_phone, Insurer.website]
    column_searchable_list = [Insurer.name]
    column_sortable_list = [Insurer.name]
    name = "Insurer"
    name_plural = "Insurers"
    icon = "fa-solid fa-building"


class PolicyAdmin(ModelView, model=Policy):
    column_list = [
        Policy.id,
        Policy.client_id,
        Policy.policy_number,
        Policy.policy_type,
        Policy.carrier_name_raw,
        Policy.verification_status,
        Policy.created_at,
    ]
    column_searchable_list = [Policy.policy_number, Policy.carrier_name_raw]
    column_sortable_list = [Policy.id, Policy.verification_status, Policy.created_at]
    column_default_sort = [(Policy.created_at, True)]
    # created_at is part of every receipt hash
    form_excluded_columns = [Policy.created_at, Policy.updated_at]
    can_delete = False
    name = "Policy"
    name_plural = "Policies"
    icon = "fa-solid fa-file-contract"


class BeneficiaryAdmin(ModelView, model=Beneficiary):
    column_list = [
        Beneficiary.id,
        Beneficiary.client_id,
        Beneficiary.first_name,
        Beneficiary.last_name,
        Beneficiary.relationship_to_client,
    ]
    column_searchable_list = [Beneficiary.first_name, Beneficiary.last_name]
    name = "Beneficiary"
    name_plural = "Beneficiaries"
    icon = "fa-solid fa-users"


class ClientInviteAdmin(ModelView, model=ClientInvite):
    column_list = [
        ClientInvite.id,
        ClientInvite.client_id,
        ClientInvite.email,
        ClientInvite.expires_at,
        ClientInvite.used_at,
        ClientInvite.revoked_at,
    ]
    column_details_exclude_list = [ClientInvite.token]
    column_default_sort = [(ClientInvite.created_at, True)]
    can_create = False
    name = "Invite"
    name_plural = "Invites"
    icon = "fa-solid fa-envelope-open-text"


class AccessRequestAdmin(ModelView, model=AccessRequest):
    column_list = [
        AccessRequest.id,
        AccessRequest.attorney_email,
        AccessRequest.client_id,
        AccessRequest.status,
        AccessRequest.created_at,
    ]
    column_sortable_list = [AccessRequest.status, AccessRequest.created_at]
    column_default_sort = [(AccessRequest.created_at, True)]
    can_create = False
    name = "Access Request"
    name_plural = "Access Requests"
    icon = "fa-solid fa-key"


class SubmissionAdmin(ModelView, model=Submission):
    column_list = [
        Submission.id,
        Submission.client_id,
        Submission.submission_type,
        Submission.status,
        Submission.created_at,
    ]
    column_default_sort = [(Submission.created_at, True)]
    can_create = False
    name = "Submission"
    name_plural = "Submissions"
    icon = "fa-solid fa-inbox"


class DocumentAdmin(ModelView, model=Document):
    column_list = [
        Document.id,
        Document.client_id,
        Document.file_name,
        Document.mime_type,
        Document.file_size,
        Document.created_at,
    ]
    column_searchable_list = [Document.file_name]
    column_default_sort = [(Document.created_at, True)]
    can_create = False
    can_edit = False
    name = "Document"
    name_plural = "Documents"
    icon = "fa-solid fa-file-upload"


class ReceiptAdmin(ModelView, model=Receipt):
    column_list = [
        Receipt.id,
        Receipt.receipt_number,
        Receipt.client_id,
        Receipt.email_sent,
        Receipt.created_at,
    ]
    column_searchable_list = [Receipt.receipt_number]
    column_default_sort = [(Receipt.created_at, True)]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Receipt"
    name_plural = "Receipts"
    icon = "fa-solid fa-receipt"


class AuditLogAdmin(ModelView, model=AuditLog):
    column_list = [
        AuditLog.id,
        AuditLog.created_at,
        AuditLog.action,
        AuditLog.user_id,
        AuditLog.client_id,
        AuditLog.message,
    ]
    column_sortable_list = [AuditLog.id, AuditLog.created_at, AuditLog.action]
    column_default_sort = [(AuditLog.created_at, True)]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Audit Log"
    name_plural = "Audit Log"
    icon = "fa-solid fa-shield-alt"


def setup_admin(app):
    """Set up SQLAdmin and mount it to the FastAPI app."""
    auth_backend = AdminAuth(
        secret_key=settings.SQLADMIN_SECRET_KEY,
    )
    admin = Admin(app, engine, title="HeirVault Admin", authentication_backend=auth_backend)

    admin.add_view(ClientAdmin)
    admin.add_view(InsurerAdmin)
    admin.add_view(PolicyAdmin)
    admin.add_view(BeneficiaryAdmin)
    admin.add_view(ClientInviteAdmin)
    admin.add_view(AccessRequestAdmin)
    admin.add_view(SubmissionAdmin)
    admin.add_view(DocumentAdmin)
    admin.add_view(ReceiptAdmin)
    admin.add_view(AuditLogAdmin)

    return admin
