from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    submission_id: str = Field(..., min_length=1, alias="submissionId")


class GradeResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    score: float | None = None
    summary: str | None = None
    reasoning: str | None = None


class SubmissionStatusResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: str
    error: str | None = None
    grade_result: GradeResult | None = None
    reward: float | None = None
    max_reward: float | None = Field(None, alias="maxReward")
    clamped_score: float | None = Field(None, alias="clampedScore")
    meta: Any = None
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")
