"""
Offset pagination helpers.

Every list endpoint answers with the same envelope:
    {"current": page, "pages": ceil(total / limit), "total": total}
"""

import math
from typing import Dict


def page_offset(page: int, limit: int) -> int:
    """Number of documents to skip for a 1-based page."""
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "current": page,
        "pages": math.ceil(total / limit) if limit else 0,
        "total": total,
    }
