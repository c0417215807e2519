# This project was developed with assistance from AI tools.
"""Policy document text extraction and field heuristics.

Two stages: pull raw text out of the upload (pymupdf text layer for PDFs,
pymupdf's Tesseract OCR text page for images), then run regex heuristics
over it to guess the policy fields. Results are suggestions only; explicit
form input always wins during intake.
"""

import logging
import re
from datetime import date, datetime

import fitz  # pymupdf
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

_MIN_TEXT_LENGTH = 20
PDF_TEXT_CONFIDENCE = 0.8
IMAGE_OCR_CONFIDENCE = 0.6

_IMAGE_TYPES = {"image/jpeg": "jpeg", "image/png": "png"}


class OcrExtractionError(Exception):
    """Raised when no usable text can be pulled from a document."""


class ExtractedPolicyData(BaseModel):
    """Fields guessed from a policy document. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    policy_number: str | None = None
    policy_type: str | None = None
    insurer_name: str | None = None
    insurer_phone: str | None = None
    insurer_email: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_POLICY_NUMBER_PATTERNS = [
    re.compile(r"policy\s*(?:number|#|no\.?|num)\s*:?\s*([A-Z0-9\-]{6,20})", re.I),
    re.compile(r"(?:policy|pol)\.?\s*(?:no|number|#|num)\s*:?\s*([A-Z0-9\-]{6,20})", re.I),
    re.compile(r"(?:certificate|cert|contract)\s*(?:number|#|no\.?)\s*:?\s*([A-Z0-9\-]{6,20})", re.I),
    re.compile(r"^([A-Z]{2,4}-?[0-9]{6,15})$", re.M),
]

_NAME_PATTERNS = [
    re.compile(
        r"(?i:insured|policyholder|owner|applicant)\s*(?i:name)?\s*:?\s*"
        r"([A-Z][a-z]{2,})\s+([A-Z][a-z]{2,})"
    ),
    re.compile(r"(?i:name)\s*:?\s*([A-Z][a-z]{2,})\s+([A-Z][a-z]{2,})"),
    re.compile(r"^([A-Z][a-z]{2,})\s+([A-Z][a-z]{2,})$", re.M),
]

_EMAIL = re.compile(r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")

_PHONE_PATTERNS = [
    re.compile(r"(?:phone|tel|telephone|mobile)\s*:?\s*(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})", re.I),
    re.compile(r"(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})"),
]

_DOB_PATTERNS = [
    re.compile(r"(?:date\s+of\s+birth|dob|birth\s+date|born)\s*:?\s*(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})", re.I),
    re.compile(r"(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})"),
]
_DATE_FORMATS = ("%m/%d/%Y", "%m-%d-%Y", "%m/%d/%y", "%m-%d-%y")

_POLICY_TYPE_PATTERNS = [
    re.compile(
        r"(?:policy\s+type|type\s+of\s+policy|coverage\s+type)\s*:?\s*"
        r"(term|whole\s+life|universal\s+life|variable\s+life|group)",
        re.I,
    ),
    re.compile(r"\b(term|whole\s+life|universal\s+life|variable\s+life|group)\b", re.I),
]

_INSURER_SUFFIX = r"(?:Insurance|Life|Assurance|Group|Company|Corp|Inc|LLC|Mutual|National)"
_INSURER_PATTERNS = [
    re.compile(
        r"(?i:insurance\s+company|insurer|carrier|underwriter)\s*:\s*"
        r"([A-Z][A-Za-z&.,' -]+?" + _INSURER_SUFFIX + r"\b(?:\s+" + _INSURER_SUFFIX + r"\b)*)",
    ),
    re.compile(
        r"([A-Z][A-Za-z&.,' -]{2,}?\s+(?:Life\s+Insurance(?:\s+Company)?|Insurance\s+Company|Assurance))"
    ),
]
_INSURER_FALSE_POSITIVE = re.compile(r"^(Policy|Certificate|Contract|Date|Name|Address)", re.I)
_HEADER_LINES = 15

_INSURER_PHONE = re.compile(
    r"(?:customer\s+service|contact)\s*(?:phone)?\s*:?\s*(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})", re.I
)
_INSURER_EMAIL = re.compile(
    r"(?:customer\s+service|contact)\s*(?:email)?\s*:?\s*([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})",
    re.I,
)

# Field weights for the heuristic confidence score
_WEIGHTS = {
    "policy_number": 0.3,
    "name": 0.2,
    "insurer_name": 0.2,
    "email": 0.1,
    "phone": 0.1,
    "date_of_birth": 0.05,
    "policy_type": 0.05,
}


def _first_match(patterns, text: str) -> re.Match | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def _parse_date(raw: str) -> date | None:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def parse_policy_text(text: str) -> ExtractedPolicyData:
    """Guess policy fields from raw document text.

    Confidence is the sum of the weights of the fields found (0..1).
    """
    normalized = re.sub(r"\s+", " ", text).strip()
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    fields: dict = {}

    match = _first_match(_POLICY_NUMBER_PATTERNS, normalized) or _first_match(
        _POLICY_NUMBER_PATTERNS[-1:], "\n".join(lines)
    )
    if match:
        fields["policy_number"] = match.group(1).strip()

    match = _first_match(_NAME_PATTERNS[:2], normalized) or _first_match(
        _NAME_PATTERNS[2:], "\n".join(lines)
    )
    if match:
        fields["first_name"] = match.group(1).strip()
        fields["last_name"] = match.group(2).strip().split()[-1]

    match = _EMAIL.search(normalized)
    if match:
        fields["email"] = match.group(1)

    match = _first_match(_PHONE_PATTERNS, normalized)
    if match:
        fields["phone"] = match.group(1).strip()

    match = _first_match(_DOB_PATTERNS, normalized)
    if match:
        parsed = _parse_date(match.group(1))
        if parsed is not None:
            fields["date_of_birth"] = parsed

    match = _first_match(_POLICY_TYPE_PATTERNS, normalized)
    if match:
        fields["policy_type"] = re.sub(r"\s+", " ", match.group(1)).upper()

    header = " ".join(lines[:_HEADER_LINES])
    for pattern in _INSURER_PATTERNS:
        match = pattern.search(header)
        if match:
            name = match.group(1).strip(" ,.")
            if not _INSURER_FALSE_POSITIVE.match(name):
                fields["insurer_name"] = name
                break

    match = _INSURER_PHONE.search(normalized)
    if match:
        fields["insurer_phone"] = match.group(1).strip()

    match = _INSURER_EMAIL.search(normalized)
    if match:
        fields["insurer_email"] = match.group(1)

    score = 0.0
    for key, weight in _WEIGHTS.items():
        present = fields.get("first_name") and fields.get("last_name") if key == "name" else fields.get(key)
        if present:
            score += weight

    return ExtractedPolicyData(**fields, confidence=round(min(score, 1.0), 4))


def extract_text(file_data: bytes, content_type: str) -> tuple[str, float]:
    """Extract raw text from a PDF or image.

    Returns:
        (text, extraction confidence)

    Raises:
        OcrExtractionError: unsupported type, unreadable file, or no text.
    """
    if content_type == "application/pdf":
        try:
            pdf = fitz.open(stream=file_data, filetype="pdf")
            text = " ".join(page.get_text() for page in pdf).strip()
            pdf.close()
        except (fitz.FileDataError, RuntimeError, ValueError) as exc:
            raise OcrExtractionError("PDF could not be read") from exc
        if len(text) < _MIN_TEXT_LENGTH:
            raise OcrExtractionError(
                "PDF appears to be scanned. Please enter information manually or upload as an image."
            )
        return text, PDF_TEXT_CONFIDENCE

    if content_type in _IMAGE_TYPES:
        try:
            doc = fitz.open(stream=file_data, filetype=_IMAGE_TYPES[content_type])
            page = doc[0]
            textpage = page.get_textpage_ocr(language="eng", full=True)
            text = page.get_text(textpage=textpage).strip()
            doc.close()
        except (fitz.FileDataError, RuntimeError, ValueError) as exc:
            raise OcrExtractionError("Image text recognition failed") from exc
        if not text:
            raise OcrExtractionError(
                "No text could be extracted from the document. Please enter information manually."
            )
        return text, IMAGE_OCR_CONFIDENCE

    raise OcrExtractionError(f"Unsupported file type: {content_type}")


def extract_policy_data(file_data: bytes, content_type: str) -> ExtractedPolicyData:
    """Extract and parse a policy document.

    Final confidence is the mean of the heuristic score and the extraction
    confidence.
    """
    text, extraction_confidence = extract_text(file_data, content_type)
    extracted = parse_policy_text(text)
    confidence = round((extracted.confidence + extraction_confidence) / 2, 4)
    logger.info(
        "Extracted policy fields (policy_number=%s, confidence=%.2f)",
        bool(extracted.policy_number),
        confidence,
    )
    return extracted.model_copy(update={"confidence": confidence})
