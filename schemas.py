from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from book import Book, HistoryEntry
from library import SearchMode, SortKey


class _Request(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class AddBookRequest(_Request):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    year: int


class UpdateBookRequest(_Request):
    id: str = Field(min_length=1)
    title: Optional[str] = Field(default=None, description="Empty keeps the current title")
    author: Optional[str] = Field(default=None, description="Empty keeps the current author")
    year: Optional[int] = Field(default=None, description="0 or missing keeps the current year")


class DeleteBookRequest(_Request):
    id: str = Field(min_length=1)
    confirmed: bool = False


class SearchRequest(_Request):
    mode: SearchMode = SearchMode.EITHER
    value: str

    @model_validator(mode="after")
    def _year_must_be_numeric(self) -> "SearchRequest":
        if self.mode is SearchMode.YEAR:
            try:
                int(self.value)
            except ValueError as exc:
                raise ValueError(f"Year search needs an integer, got {self.value!r}") from exc
        return self


class BorrowRequest(_Request):
    id_or_title_fragment: str = Field(min_length=1)
    borrower_name: str


class ReturnRequest(_Request):
    id: str = Field(min_length=1)
    name: str


class ListRequest(_Request):
    sort_key: SortKey = SortKey.NONE
    page: int = Field(default=1, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1)


class HistoryRequest(_Request):
    count: int = 0


class Page(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[Book]
    page: int
    page_size: int
    total: int
    pages: int


class HistoryPage(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    entries: List[HistoryEntry]
    total: int
