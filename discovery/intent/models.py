from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class VibeRequest(BaseModel):
    text: str = Field(..., max_length=1000)


class ParsedIntent(BaseModel):
    category_guess: str | None = None
    location_guess: str | None = None
    date_guess: date | None = None
    # Raw phrase such as "3rd march" or "next saturday", kept only when no
    # numeric date was found.
    date_phrase: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.category_guess or self.location_guess or self.date_guess or self.date_phrase)


class VibeResponse(BaseModel):
    intent: ParsedIntent
    query_params: dict[str, str] = Field(default_factory=dict)
    url: str
