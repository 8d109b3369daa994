"""
Role token scanner
==================

Finds ``{ROLE:<ident>}`` markers in free text. The scan is a plain index
walk: the opening marker is matched case-insensitively, the identifier runs
up to the next ``}`` and may not contain ``{`` or exceed
:data:`MAX_IDENT_LENGTH` characters. Anything malformed is skipped and the
walk resumes right after the rejected opener, so a broken marker never hides
a valid one that follows it.
"""

from __future__ import annotations

from typing import List

from .models import ReferenceKind, RoleReference

OPENER = "{ROLE:"
CLOSER = "}"
MAX_IDENT_LENGTH = 100  # Discord caps role names at 100 characters


def reference_for(ident: str) -> RoleReference:
    if ident.isascii() and ident.isdigit():
        return RoleReference(ReferenceKind.BY_ID, ident)
    return RoleReference(ReferenceKind.BY_NAME, ident)


def parse_tokens(text: str) -> List[RoleReference]:
    """
    Return every valid role reference in ``text``, left to right.

    Duplicates are kept; an empty list means the text is not a setup message.
    """

    refs: List[RoleReference] = []
    if not text:
        return refs

    pos = 0
    while True:
        start = text.find("{", pos)
        if start < 0:
            break
        if text[start : start + len(OPENER)].upper() != OPENER:
            pos = start + 1
            continue
        ident_start = start + len(OPENER)
        end = ident_start
        while end < len(text) and text[end] not in "{}":
            end += 1

        pos = ident_start
        if end >= len(text) or text[end] != CLOSER:
            continue  # unterminated, or interrupted by another "{"

        ident = text[ident_start:end].strip()
        pos = end + 1
        if not ident or len(ident) > MAX_IDENT_LENGTH:
            continue
        refs.append(reference_for(ident))

    return refs


__all__ = ["parse_tokens", "reference_for", "OPENER", "MAX_IDENT_LENGTH"]
