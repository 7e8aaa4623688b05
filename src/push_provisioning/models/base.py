"""Base model for push provisioning payloads."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ProvisioningModel(BaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to its wire dictionary."""
        return self.model_dump(mode="json", by_alias=True)
