# common_schema.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
import uuid

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class Pagination(BaseModel):
    page: int
    per_page: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "Pagination":
        total_pages = total // per_page
        if total % per_page:
            total_pages += 1
        return cls(page=page, per_page=per_page, total=total, total_pages=total_pages)


def normalize_page(
    page: Optional[int],
    per_page: Optional[int],
    default_per_page: int = DEFAULT_PAGE_SIZE,
    clamp_to_max: bool = False,
) -> tuple[int, int]:
    """Out-of-range paging input falls back to the defaults (or is clamped to the max)."""
    if not page or page < 1:
        page = 1
    if not per_page or per_page < 1:
        per_page = default_per_page
    elif per_page > MAX_PAGE_SIZE:
        per_page = MAX_PAGE_SIZE if clamp_to_max else default_per_page
    return page, per_page


class MemberBrief(BaseModel):
    id: uuid.UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str
