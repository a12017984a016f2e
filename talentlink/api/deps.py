"""
API Dependencies
Common dependencies shared by the list endpoints.
"""

from dataclasses import dataclass

from fastapi import Query

from talentlink.core.config import get_settings

settings = get_settings()


@dataclass
class Page:
    page: int
    limit: int


def pagination_params(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size)
) -> Page:
    """``?page=&limit=`` for offset pagination."""
    return Page(page=page, limit=limit)
