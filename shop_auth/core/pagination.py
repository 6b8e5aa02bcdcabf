from __future__ import annotations

import sys

from pydantic import BaseModel, ConfigDict, Field

UNBOUNDED_PAGE_SIZE = sys.maxsize


class PaginationInfo(BaseModel):
    """Page-based pagination parameters (pages are 1-based)."""
    model_config = ConfigDict(frozen=True)

    page: int = Field(1, ge=1, description="1-based page number")
    page_size: int = Field(100, ge=1, description="Max number of records per page")

    @property
    def index(self) -> int:
        return self.page - 1

    @property
    def offset(self) -> int:
        """Number of records to skip before this page."""
        return self.index * self.page_size

    @property
    def is_unbounded(self) -> bool:
        return self.page_size == UNBOUNDED_PAGE_SIZE

    # PUBLIC_INTERFACE
    @classmethod
    def all(cls) -> "PaginationInfo":
        """Single unbounded page covering every record."""
        return cls(page=1, page_size=UNBOUNDED_PAGE_SIZE)

    def next_page(self) -> "PaginationInfo":
        return self.model_copy(update={"page": self.page + 1})
