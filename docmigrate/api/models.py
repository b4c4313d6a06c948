"""Pydantic models for API requests and responses."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime


class StepStatusEnum(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Request Models
class StepRunRequest(BaseModel):
    direct_document_copy: Optional[bool] = None
    reset: bool = False


# Response Models
class ProgressResponse(BaseModel):
    step_id: str
    processed: List[str] = Field(default_factory=list)


class DocumentResultResponse(BaseModel):
    source_document: str
    destination_document: Optional[str] = None
    status: str
    strategy: Optional[str] = None
    pages: int = 0
    records_written: int = 0
    skip_reason: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class StepReportResponse(BaseModel):
    id: str
    step_id: str
    status: StepStatusEnum
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    documents: List[DocumentResultResponse] = Field(default_factory=list)
    previously_completed: List[str] = Field(default_factory=list)
    total_records_written: int = 0
    errors: List[Dict[str, Any]] = Field(default_factory=list)
