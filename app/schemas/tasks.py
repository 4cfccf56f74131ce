"""This file contains the scheduled task schema for the application."""

from datetime import datetime
from typing import List

from pydantic import (
    BaseModel,
    Field,
)


class ReminderSweepResponse(BaseModel):
    """Response model for one reminder sweep.

    Attributes:
        ran_at: Time the sweep used as "now".
        reminded: Sessions whose participants were emailed.
        failed: Sessions that hit an error and will be retried next run.
        skipped: Sessions left alone, e.g. not confirmed or missing a recipient.
    """

    ran_at: datetime
    reminded: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
