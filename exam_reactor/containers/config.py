"""Settings shared by every container configuration."""

import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field, PositiveFloat, field_validator

_MODULE_SEPARATOR = re.compile(r",\s*")


class ContainerConfig(BaseModel):
    """Common container settings.

    ``system_properties`` are handed to the runtime when it starts; they
    are never written into process-wide state.
    """

    name: str
    modules: Sequence[str] = Field(
        default_factory=list,
        description="Modules deployed at start, as a list or comma-separated string",
    )
    system_properties: Mapping[str, str] = Field(default_factory=dict)
    start_timeout: PositiveFloat | None = None
    stop_timeout: PositiveFloat | None = None

    @field_validator("modules", mode="before")
    @classmethod
    def split_module_list(cls, value: Any) -> Any:
        """Accept a comma-separated module list."""
        if isinstance(value, str):
            modules = _MODULE_SEPARATOR.split(value.strip())
            return [module for module in modules if module]
        return value
