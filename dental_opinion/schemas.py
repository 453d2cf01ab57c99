from pydantic import BaseModel, ConfigDict, StrictStr
from typing import List, Optional, Tuple


class AnalysisRequest(BaseModel):
    image: bytes
    mime_type: str
    concern: str


class AnalysisResult(BaseModel):
    """Structured second opinion returned by the model.

    Decoding is strict: every field is required, no type coercion is applied
    and unknown keys are rejected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    observation: StrictStr
    potential_issues: Tuple[StrictStr, ...]
    recommendations: Tuple[StrictStr, ...]
    disclaimer: StrictStr


class ErrorResponse(BaseModel):
    detail: str


class PreviewResponse(BaseModel):
    filename: str
    mime_type: str
    size: int
    preview: Optional[str] = None
    warnings: List[str] = []
