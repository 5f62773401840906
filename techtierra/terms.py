"""Search-bar text parsing."""

from __future__ import annotations

import re
from typing import List, Tuple

USER_TERM_RE = re.compile(r"^user:(\S+)$", re.IGNORECASE)


def parse_terms(text: str | None) -> Tuple[List[str], List[str]]:
    """Split raw search text into ``(keyword_terms, user_terms)``.

    Tokens of the form ``user:<name>`` contribute ``<name>`` to the user terms;
    every other token is kept verbatim as a keyword. A bare ``user:`` token has
    nothing to capture and is dropped.
    """
    keywords: List[str] = []
    users: List[str] = []
    if not text:
        return keywords, users
    for token in text.split():
        match = USER_TERM_RE.match(token)
        if match:
            users.append(match.group(1))
        elif token.lower() == "user:":
            continue
        else:
            keywords.append(token)
    return keywords, users
