"""Default certificate type labels derived from content type."""

import mimetypes

PDF = "PDF"
IMAGE = "Image"
DOCUMENT = "Document"
OTHER = "Other"

DOCUMENT_TYPES = {
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.oasis.opendocument.text",
    "application/rtf",
    "text/plain",
}


def guess_content_type(file_name: str, content_type: str = None) -> str:
    """Use the declared content type, falling back to the file extension."""
    if content_type and content_type != "application/octet-stream":
        return content_type.split(";")[0].strip().lower()
    guessed, _ = mimetypes.guess_type(file_name or "")
    return guessed or "application/octet-stream"


def label_for_content_type(content_type: str) -> str:
    """Best-effort certificate type label for a content type."""
    content_type = (content_type or "").lower()
    if content_type == "application/pdf":
        return PDF
    if content_type.startswith("image/"):
        return IMAGE
    if content_type in DOCUMENT_TYPES:
        return DOCUMENT
    return OTHER
