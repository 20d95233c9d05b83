from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.core.dependencies import get_request_pipeline
from app.core.rate_limit import get_client_ip
from app.schemas.greeting import ApiInfoResponse, GreetingMetadata, GreetingV2Response
from app.services.request_pipeline import Rejected, RequestPipeline

router = APIRouter(prefix="/api/v2", tags=["Greeting v2"])


@router.get("/greeting", response_model=GreetingV2Response)
def enhanced_greeting(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_request_pipeline)],
    lang: Annotated[str, Query(description="Two-letter language code, e.g. 'es'.")] = "en",
) -> GreetingV2Response:
    """Return the greeting wrapped with language metadata.

    Returns:
        GreetingV2Response: message, language, timestamp, version and
            metadata (isSupported, characterCount, encoding).
    """
    outcome = pipeline.resolve_greeting(lang, client=get_client_ip(request))
    if isinstance(outcome, Rejected):
        raise outcome.to_error()

    return GreetingV2Response(
        message=outcome.value,
        language=outcome.language,
        timestamp=datetime.now(timezone.utc).isoformat(),
        metadata=GreetingMetadata(
            is_supported=outcome.is_supported,
            character_count=outcome.character_count,
        ),
    )


@router.get("/info", response_model=ApiInfoResponse)
def api_info() -> ApiInfoResponse:
    """Describe the v2 API and where v1 lives."""
    return ApiInfoResponse(
        version="2.0",
        description="Enhanced Greeting API with metadata support",
        features=[
            "Enhanced response format",
            "Request metadata",
            "Timestamp tracking",
            "Character count",
            "Language support detection",
        ],
        endpoints={
            "greeting": "/api/v2/greeting",
            "info": "/api/v2/info",
        },
        compatibility={
            "v1": "Available at /",
            "v2": "Current version",
        },
    )
