"""Extraction of metadata embedded in object definitions.

Definitions may carry labelled comment lines such as::

    -- Ersteller/in: Jane Doe
    -- Erstelldatum: 2023-04-01
    -- Kommentar: Open orders per customer

and change-history lines such as::

    Commit;jdoe;2023-05-02;Added region column
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

# Zero-valued timestamp returned for missing or unparseable dates
ZERO_DATE = datetime.min

DATE_FORMAT = "%Y-%m-%d"

CREATOR_LABELS = ("ersteller/in", "creator", "author")
CREATED_LABELS = ("erstelldatum", "creation date", "created")
DESCRIPTION_LABELS = ("kommentar", "description", "comment")

COMMENT_DECORATION = " \t-*/#"

CHANGE_MARKER = "Commit;"

# Openers of a comment that may trail code on the same line
COMMENT_OPENERS = re.compile(r"--|/\*")


@dataclass(frozen=True)
class CommentAnnotation:
    """Creator, creation date and description of an object."""
    creator: str = ""
    created: datetime = ZERO_DATE
    description: str = ""

    def is_empty(self) -> bool:
        return not self.creator and not self.description and self.created == ZERO_DATE

    @property
    def created_text(self) -> str:
        if self.created == ZERO_DATE:
            return ""
        return self.created.strftime(DATE_FORMAT)


def _labelled_value(line: str, labels: Tuple[str, ...]) -> Optional[str]:
    """Return the value of ``label: value`` if the line carries one of the labels.

    The label may open the line or follow a ``--`` or ``/*`` comment that
    starts after code, as in ``CREATE VIEW v AS -- Author: Jane``.
    """
    value = _leading_label_value(line, labels)
    if value is not None:
        return value
    for opener in COMMENT_OPENERS.finditer(line):
        value = _leading_label_value(line[opener.end():], labels)
        if value is not None:
            return value
    return None


def _leading_label_value(line: str, labels: Tuple[str, ...]) -> Optional[str]:
    text = line.lstrip(COMMENT_DECORATION)
    lowered = text.lower()
    for label in labels:
        if not lowered.startswith(label):
            continue
        rest = text[len(label):].lstrip(" \t")
        if rest.startswith(":"):
            value = rest[1:].strip()
            if value.endswith("*/"):
                value = value[:-2].rstrip()
            return value
    return None


def parse_date(value: str) -> datetime:
    """Parse a strict YYYY-MM-DD date; anything else yields ZERO_DATE."""
    value = (value or "").strip()
    if len(value) != 10:
        return ZERO_DATE
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return ZERO_DATE


def extract_annotations(definition: str) -> CommentAnnotation:
    """Extract creator, creation date and description from a definition.

    Labels are matched case-insensitively at the start of a line (after
    comment decoration) or at the start of a comment trailing code on a
    line; the first occurrence of each label wins. All three
    labels must be present, otherwise an empty annotation is returned.
    """
    if not definition:
        return CommentAnnotation()

    labels = {
        "creator": CREATOR_LABELS,
        "created": CREATED_LABELS,
        "description": DESCRIPTION_LABELS,
    }
    found: Dict[str, str] = {}

    for line in definition.splitlines():
        for key, key_labels in labels.items():
            if key in found:
                continue
            value = _labelled_value(line, key_labels)
            if value is not None:
                found[key] = value
                break
        if len(found) == len(labels):
            break

    if len(found) != len(labels):
        return CommentAnnotation()

    return CommentAnnotation(
        creator=found["creator"],
        created=parse_date(found["created"]),
        description=found["description"],
    )


def parse_change_history(definition: str) -> List[List[str]]:
    """Collect the fields of every ``Commit;`` line, in order of appearance."""
    history = []
    for line in (definition or "").splitlines():
        line = line.strip()
        if line.startswith(CHANGE_MARKER):
            history.append(line[len(CHANGE_MARKER):].split(";"))
    return history
