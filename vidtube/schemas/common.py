from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ApiResponse(ApiModel):
    status_code: int
    data: Any = None
    message: str = "Success"
    success: bool = True


class ApiErrorResponse(ApiModel):
    status_code: int
    message: str
    errors: List[Any] = Field(default_factory=list)
    success: bool = False


class Page(ApiModel, Generic[T]):
    docs: List[T]
    total_docs: int
    limit: int
    page: int
    total_pages: int
    has_prev_page: bool
    has_next_page: bool
    prev_page: Optional[int] = None
    next_page: Optional[int] = None

    @classmethod
    def build(cls, docs: List[T], total_docs: int, page: int, limit: int) -> "Page[T]":
        total_pages = max(1, -(-total_docs // limit))
        return cls(
            docs=docs,
            total_docs=total_docs,
            limit=limit,
            page=page,
            total_pages=total_pages,
            has_prev_page=page > 1,
            has_next_page=page < total_pages,
            prev_page=page - 1 if page > 1 else None,
            next_page=page + 1 if page < total_pages else None,
        )
