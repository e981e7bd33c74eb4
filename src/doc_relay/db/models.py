"""Artifact record models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ArtifactDraft(BaseModel):
    """Fields supplied at ingest; the registry assigns the rest."""

    model_config = ConfigDict(frozen=True)

    display_name: Optional[str] = Field(None, description="Caller label or original filename stem")
    description: Optional[str] = Field(None, description="Free text")
    storage_locator: str = Field(..., description="Provider secure URL")
    derived_download_locator: Optional[str] = Field(
        None, description="Download URL derived from a caller-supplied sharing link"
    )
    content_type: Optional[str] = Field(None, description="Accepted media type")


class ArtifactRecord(ArtifactDraft):
    """A persisted artifact. Never updated in place."""

    id: str = Field(..., description="Registry-assigned identifier")
    created_at: datetime = Field(..., description="Insert timestamp (UTC)")

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ArtifactRecord":
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)


__all__ = ["ArtifactDraft", "ArtifactRecord"]
