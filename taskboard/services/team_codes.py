"""Invite code generation for teams."""

import secrets
import string

from taskboard.core.config import settings

TEAM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_team_code(length: int = None) -> str:
    """Random uppercase alphanumeric code, TEAM_CODE_LENGTH characters by default."""
    length = length or settings.TEAM_CODE_LENGTH
    return "".join(secrets.choice(TEAM_CODE_ALPHABET) for _ in range(length))


def normalize_team_code(code: str) -> str:
    """Codes are issued uppercase; accept user input with stray case or spaces."""
    return (code or "").strip().upper()
