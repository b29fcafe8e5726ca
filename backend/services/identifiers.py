import re
from dataclasses import dataclass
from enum import Enum

CATALOG_ID_RE = re.compile(r"[0-9a-fA-F]{24}")
EXTERNAL_KEY_RE = re.compile(r"[A-Za-z0-9_-]{10,15}")


class ReferenceKind(str, Enum):
    CATALOG_ID = "catalog_id"
    EXTERNAL_KEY = "external_key"
    FREE_TEXT = "free_text"


@dataclass(frozen=True)
class Reference:
    kind: ReferenceKind
    value: str


def classify(ref: str) -> Reference:
    """
    Decide what kind of song reference a caller sent.

    Purely syntactic. A string that looks like a YouTube video id is treated
    as one even if it could also be a short title.
    """
    value = ref.strip()
    if CATALOG_ID_RE.fullmatch(value):
        return Reference(ReferenceKind.CATALOG_ID, value)
    if EXTERNAL_KEY_RE.fullmatch(value):
        return Reference(ReferenceKind.EXTERNAL_KEY, value)
    return Reference(ReferenceKind.FREE_TEXT, value)
