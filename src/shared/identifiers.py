"""
Identifiers
===========

Document id generation and the reversible folder id encoding.

Folders have no row of their own, so their id is derived from the name:
``fld_`` followed by the unpadded URL-safe base64 of the UTF-8 name.
"""

import base64
import binascii
import re
import uuid

FOLDER_ID_PREFIX = "fld_"
DOCUMENT_ID_PREFIX = "doc_"

_URLSAFE_B64 = re.compile(r"^[A-Za-z0-9_-]+$")


def generate_document_id() -> str:
    return f"{DOCUMENT_ID_PREFIX}{uuid.uuid4().hex[:16]}"


def encode_folder_id(name: str) -> str:
    """Build the folder id for a category name."""
    encoded = base64.urlsafe_b64encode(name.encode("utf-8")).decode("ascii")
    return f"{FOLDER_ID_PREFIX}{encoded.rstrip('=')}"


def decode_folder_id(folder_id: str) -> str:
    """
    Recover the category name from a folder id.

    Raises:
        ValueError: If the id is not a well-formed folder id.
    """
    if not folder_id or not folder_id.startswith(FOLDER_ID_PREFIX):
        raise ValueError(f"Malformed folder id: {folder_id!r}")

    payload = folder_id[len(FOLDER_ID_PREFIX) :]
    if not _URLSAFE_B64.match(payload):
        raise ValueError(f"Malformed folder id: {folder_id!r}")

    padded = payload + "=" * (-len(payload) % 4)
    try:
        name = base64.urlsafe_b64decode(padded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Malformed folder id: {folder_id!r}") from e

    if not name:
        raise ValueError(f"Malformed folder id: {folder_id!r}")
    return name
