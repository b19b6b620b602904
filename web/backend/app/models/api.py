"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    message: str = "the server is up and running"


class ApiInfoResponse(BaseModel):
    name: str
    version: str
    description: str = ""
    stacks: list[str] = Field(default_factory=list)
    docs: str = "/docs"


class PullErrorResponse(BaseModel):
    """Body returned when a devfile could not be pulled."""

    error: str
    status: str
