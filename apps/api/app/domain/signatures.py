"""Object key layout for submission signature images."""

from uuid import uuid4

from app.repositories.base import SignatureField
from app.schemas.submission import SignatureKind

SIGNATURE_CONTENT_TYPE = "image/png"
_SIGNATURE_EXTENSION = ".png"

_KEY_PREFIXES: dict[SignatureKind, str] = {
    SignatureKind.STUDENT: "signatures",
    SignatureKind.SUPERVISOR: "supervisor-signatures",
    SignatureKind.PRE_APPROVED: "pre-approved-signatures",
}

_RECORD_FIELDS: dict[SignatureKind, SignatureField] = {
    SignatureKind.STUDENT: "signature_key",
    SignatureKind.SUPERVISOR: "supervisor_signature_key",
    SignatureKind.PRE_APPROVED: "pre_approved_signature_key",
}


def key_prefix(kind: SignatureKind) -> str:
    return _KEY_PREFIXES[kind]


def record_field(kind: SignatureKind) -> SignatureField:
    """Name of the submission attribute that stores the key for ``kind``."""
    return _RECORD_FIELDS[kind]


def owner_namespace(kind: SignatureKind, owner_id: str) -> str:
    # Trailing slash keeps "signatures/" from matching "supervisor-signatures/".
    return f"{key_prefix(kind)}/{owner_id}/"


def submission_namespace(kind: SignatureKind, owner_id: str, submission_id: str) -> str:
    return f"{owner_namespace(kind, owner_id)}{submission_id}/"


def build_signature_key(kind: SignatureKind, owner_id: str, submission_id: str) -> str:
    """Return a fresh, unguessable key under the submission's namespace for ``kind``."""
    return f"{submission_namespace(kind, owner_id, submission_id)}{uuid4().hex}{_SIGNATURE_EXTENSION}"


def is_in_owner_namespace(kind: SignatureKind, owner_id: str, key: str) -> bool:
    return key.startswith(owner_namespace(kind, owner_id))


def is_submission_signature_key(kind: SignatureKind, owner_id: str, submission_id: str, key: str) -> bool:
    """Check that ``key`` has the exact shape :func:`build_signature_key` produces."""
    namespace = submission_namespace(kind, owner_id, submission_id)
    if not key.startswith(namespace):
        return False

    filename = key[len(namespace):]
    if "/" in filename or not filename.endswith(_SIGNATURE_EXTENSION):
        return False
    return len(filename) > len(_SIGNATURE_EXTENSION)
