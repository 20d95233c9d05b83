from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from app.core.dependencies import get_request_pipeline
from app.core.rate_limit import get_client_ip
from app.services.request_pipeline import Rejected, RequestPipeline

router = APIRouter(tags=["Greeting"])

LangQuery = Annotated[
    str,
    Query(description="Two-letter language code, e.g. 'es'. Unsupported codes fall back to the default."),
]


@router.get("/", response_class=PlainTextResponse)
def home(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_request_pipeline)],
    lang: LangQuery = "en",
) -> str:
    """Return the greeting for ``lang`` as plain text.

    Resolution runs on the request thread; a cache miss blocks it for the
    lookup latency.

    Raises:
        ValidationAppError: 400 when the language code is malformed.
        RateLimitAppError: 429 when the rate limit is exceeded.
        ResolutionAppError: 500 when resolution fails.
    """
    outcome = pipeline.resolve_greeting(lang, client=get_client_ip(request))
    if isinstance(outcome, Rejected):
        raise outcome.to_error()
    return outcome.value


@router.get("/languages")
def available_languages(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_request_pipeline)],
) -> dict[str, str]:
    """Return every supported language code mapped to its greeting."""
    outcome = pipeline.list_languages(client=get_client_ip(request))
    if isinstance(outcome, Rejected):
        raise outcome.to_error()
    return dict(outcome.value)


@router.get("/async", response_class=PlainTextResponse)
async def greeting_async(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_request_pipeline)],
    lang: LangQuery = "en",
) -> str:
    """Same contract as ``/``, resolved on the dedicated worker pool."""
    outcome = await pipeline.resolve_greeting_async(lang, client=get_client_ip(request))
    if isinstance(outcome, Rejected):
        raise outcome.to_error()
    return outcome.value
