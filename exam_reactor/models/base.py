"""Base model shared by suite definitions, probe manifests and payloads."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model; fields may be populated by name or by alias."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
