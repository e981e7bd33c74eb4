from __future__ import annotations

from fastapi import Request

from doc_relay.api.fastapi.settings import ApiConfig
from doc_relay.service import ArtifactService


def get_service(request: Request) -> ArtifactService:
    return request.app.state.artifact_service  # type: ignore[attr-defined]


def get_api_config(request: Request) -> ApiConfig:
    return request.app.state.api_config  # type: ignore[attr-defined]
