import random
import unicodedata
import uuid

from .config import DEFAULT_CODE_ALPHABET, DEFAULT_CODE_LENGTH

MAX_NAME_LENGTH = 24
DEFAULT_DISPLAY_NAME = "Guest"
PARTICIPANT_ID_LENGTH = 8


def generate_session_code(alphabet=DEFAULT_CODE_ALPHABET, length=DEFAULT_CODE_LENGTH):
    return "".join(random.choice(alphabet) for _ in range(length))


def generate_participant_id(taken=()):
    while True:
        candidate = uuid.uuid4().hex[:PARTICIPANT_ID_LENGTH]
        if candidate not in taken:
            return candidate


def normalize_session_code(value):
    """Canonical form of a typed session code, or None if nothing is left."""
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = unicodedata.normalize("NFC", value)
    cleaned = "".join(ch for ch in value if ch.isalnum())
    return cleaned.upper() or None


def normalize_display_name(value):
    if value is None:
        value = ""
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    if not value:
        return DEFAULT_DISPLAY_NAME
    return value[:MAX_NAME_LENGTH]
