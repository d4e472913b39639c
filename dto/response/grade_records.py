from typing import Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class GradeRecordResponseBase(BaseModel):
    name: str
    grade1: float
    grade2: float
    grade3: float
    average: float


class EnvelopeResponse(BaseModel, Generic[T]):
    success: bool
    message: Optional[str] = None
    data: Optional[T] = None
    total: Optional[int] = None
    error: Optional[str] = None


class ApiInfoResponse(BaseModel):
    message: str
    version: str
    endpoints: Dict[str, str]


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    database: str


GradeRecordEnvelope = EnvelopeResponse[GradeRecordResponseBase]
GradeRecordListEnvelope = EnvelopeResponse[List[GradeRecordResponseBase]]
