from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response schema for current-version listings."""

    items: list[T]
    total: int
    page: int
    page_size: int
