"""Account reference passed to cache purges."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AccountRef(BaseModel):
    """The identifying fields of an account (collective, user, host...)."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Account primary key")
    slug: str = Field(..., min_length=1, description="URL slug, e.g. 'opencollective'")
