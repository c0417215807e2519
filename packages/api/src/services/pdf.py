# This project was developed with assistance from AI tools.
"""PDF rendering: client receipts, the registry summary, and the receipts & audit trail report."""

import logging
from datetime import UTC, datetime

from db import Beneficiary, Client, Policy, Receipt
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .receipt_hash import format_receipt_timestamp

logger = logging.getLogger(__name__)

_NAVY = (17, 28, 51)
_GREY = (110, 110, 110)


def _safe(value) -> str:
    # Core PDF fonts are latin-1 only
    text = "" if value is None else str(value)
    return text.encode("latin-1", "replace").decode("latin-1")


class HeirVaultPDF(FPDF):
    """Branded page layout shared by every HeirVault document."""

    def __init__(self, title: str):
        super().__init__()
        self.doc_title = title
        self.set_auto_page_break(auto=True, margin=18)
        self.alias_nb_pages()

    def header(self):
        self.set_font("helvetica", "B", 10)
        self.set_text_color(*_GREY)
        self.cell(0, 8, "HEIRVAULT - Life Insurance & Beneficiary Registry", align="R",
                  new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(2)

    def footer(self):
        self.set_y(-15)
        self.set_font("helvetica", "I", 8)
        self.set_text_color(*_GREY)
        self.cell(0, 10, f"{_safe(self.doc_title)} - Page {self.page_no()}/{{nb}}", align="C")

    def title_block(self, title: str, subtitle: str | None = None):
        self.set_font("helvetica", "B", 20)
        self.set_text_color(*_NAVY)
        self.cell(0, 12, _safe(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if subtitle:
            self.set_font("helvetica", "", 11)
            self.set_text_color(*_GREY)
            self.cell(0, 7, _safe(subtitle), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(4)

    def section(self, title: str):
        self.ln(2)
        self.set_font("helvetica", "B", 13)
        self.set_fill_color(240, 243, 248)
        self.set_text_color(*_NAVY)
        self.cell(0, 9, _safe(title), fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(2)

    def field(self, label: str, value):
        self.set_text_color(0, 0, 0)
        self.set_font("helvetica", "B", 10)
        self.cell(45, 6, _safe(label))
        self.set_font("helvetica", "", 10)
        self.multi_cell(0, 6, "-" if value is None else _safe(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def mono(self, value: str):
        self.set_font("courier", "", 9)
        self.set_text_color(0, 0, 0)
        self.multi_cell(0, 5, _safe(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _now_label() -> str:
    return format_receipt_timestamp(datetime.now(UTC))


def render_receipt_pdf(
    receipt: Receipt,
    client: Client,
    policies: list[Policy],
    update_url: str | None = None,
) -> bytes:
    """Render the registration receipt sent to the client.

    ``policies`` must have their insurer loaded; carrier names are read from
    ``display_carrier``.
    """
    pdf = HeirVaultPDF("Registration Confirmation Receipt")
    pdf.add_page()
    pdf.title_block("Registration Confirmation Receipt", "Life Insurance & Beneficiary Registry")

    pdf.section("Receipt")
    pdf.field("Receipt Number:", receipt.receipt_number)
    pdf.field("Registered At:", format_receipt_timestamp(receipt.created_at))
    pdf.field("Receipt Generated:", _now_label())
    pdf.field("Integrity Hash:", "")
    pdf.mono(receipt.receipt_hash or "not yet computed")

    pdf.section("Client Information")
    pdf.field("Name:", f"{client.first_name} {client.last_name}")
    pdf.field("Email:", client.email)
    pdf.field("Phone:", client.phone)
    pdf.field("Date of Birth:", client.date_of_birth.isoformat() if client.date_of_birth else None)

    pdf.section(f"Registered Policies ({len(policies)})")
    if not policies:
        pdf.field("", "No policies registered yet.")
    for index, policy in enumerate(policies, start=1):
        pdf.set_font("helvetica", "B", 11)
        pdf.set_text_color(*_NAVY)
        pdf.cell(0, 7, f"Policy {index}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.field("Insurer:", policy.display_carrier or "Unknown carrier")
        pdf.field("Policy Number:", policy.policy_number or "Not provided")
        pdf.field("Policy Type:", policy.policy_type)
        pdf.ln(1)

    if update_url:
        pdf.section("Keep Your Registration Current")
        pdf.field("Update link:", update_url)

    pdf.ln(4)
    pdf.set_font("helvetica", "I", 9)
    pdf.set_text_color(*_GREY)
    pdf.multi_cell(
        0,
        5,
        "The integrity hash covers this receipt and every policy registered up to the "
        "time above. It can be re-verified at any time by your attorney.",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    return bytes(pdf.output())


def _person(b: Beneficiary) -> str:
    name = f"{b.first_name} {b.last_name}"
    return f"{name} ({b.relationship_to_client})" if b.relationship_to_client else name


def render_client_summary_pdf(
    client: Client,
    policies: list[Policy],
    beneficiaries: list[Beneficiary],
    firm_name: str | None = None,
) -> bytes:
    """Render the registry summary an attorney hands over during probate.

    ``policies`` need ``insurer`` and ``policy_beneficiaries.beneficiary``
    loaded (see ``load_client_summary``).
    """
    pdf = HeirVaultPDF("Client Registry Summary")
    pdf.add_page()
    pdf.title_block(
        "Client Registry Summary",
        f"{client.first_name} {client.last_name} - Generated {_now_label()}",
    )
    if firm_name:
        pdf.field("Prepared by:", firm_name)

    pdf.section("Client Information")
    pdf.field("Name:", f"{client.first_name} {client.last_name}")
    pdf.field("Email:", client.email)
    pdf.field("Phone:", client.phone)
    pdf.field("Date of Birth:", client.date_of_birth.isoformat() if client.date_of_birth else None)
    pdf.field("Registered:", format_receipt_timestamp(client.created_at))

    pdf.section(f"Policies ({len(policies)})")
    if not policies:
        pdf.field("", "No policies recorded.")
    for policy in policies:
        pdf.set_font("helvetica", "B", 11)
        pdf.set_text_color(*_NAVY)
        pdf.cell(
            0, 7, _safe(policy.display_carrier or "Unknown carrier"),
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
        pdf.field("Policy Number:", policy.policy_number or "Not provided")
        pdf.field("Policy Type:", policy.policy_type)
        pdf.field("Verification:", policy.verification_status.value)
        if policy.insurer is not None:
            pdf.field("Insurer Phone:", policy.insurer.contact_phone)
            pdf.field("Insurer Email:", policy.insurer.contact_email)
        named = [link.beneficiary for link in policy.policy_beneficiaries]
        pdf.field("Beneficiaries:", ", ".join(_person(b) for b in named) or "None designated")
        pdf.ln(1)

    pdf.section(f"Beneficiaries ({len(beneficiaries)})")
    if not beneficiaries:
        pdf.field("", "No beneficiaries recorded.")
    for beneficiary in beneficiaries:
        pdf.field("Name:", _person(beneficiary))
        pdf.field("Email:", beneficiary.email)
        pdf.field("Phone:", beneficiary.phone)
        pdf.ln(1)

    return bytes(pdf.output())


def render_audit_trail_pdf(client: Client, report: dict) -> bytes:
    """Render the receipts & audit trail report for a client.

    ``report`` is the structure returned by ``get_receipts_audit``.
    """
    summary = report["summary"]
    pdf = HeirVaultPDF("Receipts & Audit Trail")
    pdf.add_page()
    pdf.title_block("Legal Defensibility Report", "Receipts & Audit Trail")

    pdf.section("Client Information")
    pdf.field("Name:", f"{client.first_name} {client.last_name}")
    pdf.field("Email:", client.email)
    pdf.field("Client ID:", client.id)
    pdf.field("Report Generated:", _now_label())

    pdf.section("Summary")
    pdf.field("Receipts:", summary["total_receipts"])
    pdf.field("Failed verification:", summary["tampered_receipts"])
    pdf.field("Audit entries:", summary["total_audit_entries"])
    if summary["returned_audit_entries"] < summary["total_audit_entries"]:
        pdf.field("Listed below:", f"{summary['returned_audit_entries']} most recent")
    pdf.field("First entry:", summary["first_entry_at"])
    pdf.field("Last entry:", summary["last_entry_at"])

    pdf.section("Receipts")
    for row in report["receipts"]:
        pdf.field("Receipt Number:", row["receipt_number"])
        pdf.field("Generated:", row["created_at"])
        pdf.field("Email Sent:", "Yes" if row["email_sent"] else "No")
        pdf.field("Policies hashed:", len(row["policies"]))
        pdf.field("Verification:", "MATCH" if row["matches"] else "MISMATCH")
        pdf.field("Stored hash:", "")
        pdf.mono(row["stored_hash"] or "none")
        if not row["matches"]:
            pdf.field("Recomputed:", "")
            pdf.mono(row["recomputed_hash"])
        pdf.ln(2)

    pdf.section("Audit Trail")
    for entry in report["audit_log"]:
        pdf.field("Timestamp:", entry["created_at"])
        pdf.field("Action:", entry["action"])
        pdf.field("Message:", entry["message"])
        pdf.field("Actor:", entry["user_id"] or "system")
        pdf.field("Entry hash:", "")
        pdf.mono(entry["hash"])
        pdf.ln(1)

    logger.info(
        "Rendered audit trail report for client %s (%d receipts, %d entries)",
        client.id,
        summary["total_receipts"],
        summary["total_audit_entries"],
    )
    return bytes(pdf.output())
