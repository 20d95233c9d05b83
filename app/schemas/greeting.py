"""Pydantic schemas for greeting API responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GreetingMetadata(BaseModel):
    """Extra facts about the returned greeting."""

    model_config = ConfigDict(populate_by_name=True)

    is_supported: bool = Field(
        ...,
        alias="isSupported",
        description="False when the requested language fell back to the default greeting.",
    )
    character_count: int = Field(
        ...,
        alias="characterCount",
        description="Number of characters in the greeting message.",
    )
    encoding: str = Field(
        default="UTF-8",
        description="Text encoding of the message.",
    )


class GreetingV2Response(BaseModel):
    """Enhanced greeting with language metadata."""

    message: str = Field(..., description="Greeting text.")
    language: str = Field(..., description="Sanitized language code that was requested.")
    timestamp: str = Field(..., description="ISO-8601 time the response was produced.")
    version: str = Field(default="v2", description="API version.")
    metadata: GreetingMetadata


class ApiInfoResponse(BaseModel):
    """Static description of the v2 API."""

    version: str = Field(default="2.0")
    description: str
    features: list[str] = Field(default_factory=list)
    endpoints: dict[str, str] = Field(default_factory=dict)
    compatibility: dict[str, str] = Field(default_factory=dict)
