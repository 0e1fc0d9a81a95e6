"""Pydantic models for runtime management API responses."""

from typing import Literal

from pydantic import BaseModel


class RuntimeStatus(BaseModel):
    """Response from the runtime start endpoint."""

    status: Literal["running", "starting", "stopped"]
    version: str | None = None


class Deployment(BaseModel):
    """Response from the deployment endpoint."""

    id: str
    name: str
