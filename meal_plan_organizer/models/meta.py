"""
Audit record for one pipeline stage execution.

Unlike the domain models, ``RunMetadata`` is mutable: ``PipelineStage.run()``
fills in ``status``, ``rows_processed``, ``error_message`` and
``finished_at`` as the stage progresses. ``config_snapshot`` keeps the full
``AppConfig`` dump so a past recommendation run can be replayed against the
same data.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict

PipelineStageName = Literal["import", "recommend"]
RunStatus = Literal["started", "success", "failed", "skipped"]


class RunMetadata(BaseModel):
    """One row of ``run_metadata``.

    ``run_id`` stays ``None`` until the record is first inserted;
    ``week_start_date`` is only set by ``recommend`` runs.
    """

    model_config = ConfigDict(validate_assignment=True)

    run_id: Optional[int] = None
    run_slug: str
    pipeline_stage: PipelineStageName
    status: RunStatus = "started"
    week_start_date: Optional[date] = None
    config_snapshot: dict[str, Any]
    rows_processed: int = 0
    error_message: Optional[str] = None
    started_at: datetime
    finished_at: Optional[datetime] = None
