import json
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

# ==========================================
# 📥 INPUT MODELS
# ==========================================

def _scalar_to_text(value):
    # JSON numbers and booleans arrive as text; falsy ones count as missing
    if isinstance(value, (bool, int, float)):
        return str(value) if value else None
    return value

class VerifyRequest(BaseModel):
    """Text to analyze. `value` is optional here so the route can answer 400 itself."""
    type: Optional[str] = "text"
    value: Optional[str] = None

    coerce_value = field_validator("value", mode="before")(_scalar_to_text)

class ReportSubmission(BaseModel):
    type: Optional[str] = "text"
    value: Optional[str] = None
    reasons: List[str] = []
    score: int = Field(default=0, ge=0, le=100)

    coerce_value = field_validator("value", mode="before")(_scalar_to_text)

# ==========================================
# 📤 RESPONSE MODELS
# ==========================================

class VerdictResponse(BaseModel):
    score: int
    category: str
    level: str
    reasons: List[str]
    features: Dict[str, Any] = {}

class ReportCreated(BaseModel):
    ok: bool = True
    id: int

class ReportResponse(BaseModel):
    """
    Schema for sending stored reports to the frontend.
    `category` is derived from the stored score, it is not a column.
    """
    id: int
    type: Optional[str] = "text"
    value: str
    reasons: List[str] = []
    score: int = 0
    category: str
    created_at: Optional[datetime] = None

    @field_validator("reasons", mode="before")
    @classmethod
    def parse_reasons(cls, value):
        # Rows written by older clients may hold raw JSON text or junk
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return []
        if not isinstance(value, list):
            return []
        return [str(r) for r in value]

    class Config:
        from_attributes = True

class StatisticsResponse(BaseModel):
    total_reports: int
    high: int
    medium: int
    low: int
    avg_score: float
    recent_reports: List[ReportResponse]
