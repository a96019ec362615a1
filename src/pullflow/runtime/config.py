"""Driver configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DriveConfig(BaseModel):
    """Limits and trace detail for driving a machine."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_steps: int | None = Field(
        default=None,
        gt=0,
        description="Machine nodes the driver may visit before giving up; None means unlimited",
    )
    record_values: bool = Field(
        default=False,
        description="Include repr() of outputs and inputs in trace evidence",
    )
