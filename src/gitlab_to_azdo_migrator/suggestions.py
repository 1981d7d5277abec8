"""
Rewriting of GitLab suggestion blocks for Azure DevOps.

GitLab qualifies suggestions with the lines they replace (```` ```suggestion:-1+2 ````),
Azure DevOps only understands a plain ```` ```suggestion ```` fence that applies to the
commented line.
"""

from __future__ import annotations

import re
from typing import Final

# Matches the qualified fence up to the end of its line
SUGGESTION_RANGE_PATTERN: Final[re.Pattern[str]] = re.compile(r"```suggestion:.*")

SUGGESTION_FENCE: Final[str] = "```suggestion"

MULTILINE_SUGGESTION_WARNING: Final[str] = (
    "🚩 **Multiline suggestions are not supported in AzDO - if suggestion is multiline, commit it manually**"
)


def strip_suggestion_ranges(body: str, *, warn: bool = False) -> str:
    """Replace range-qualified suggestion fences with the plain Azure DevOps fence.

    Args:
        body: Markdown body of a GitLab note
        warn: Put MULTILINE_SUGGESTION_WARNING on the line above every rewritten fence

    Returns:
        The body with every ```` ```suggestion:<range> ```` fence rewritten
    """
    replacement = f"{MULTILINE_SUGGESTION_WARNING}\n{SUGGESTION_FENCE}" if warn else SUGGESTION_FENCE
    return SUGGESTION_RANGE_PATTERN.sub(lambda _match: replacement, body)
