from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.models.report_models import CategoryResult, GlobalResult


class ResultResponse(BaseModel):
    success: bool = True
    resultId: str
    categoryResults: Dict[str, CategoryResult] = {}
    # absent on some older stored documents
    globalResult: Optional[GlobalResult] = None
    baiResult: Optional[CategoryResult] = None
    userInfo: Optional[Dict[str, Any]] = None
    createdAt: Optional[datetime] = None


class ResultHistoryResponse(ResultResponse):
    answers: Dict[str, Any] = {}
    isHistory: bool = True


class HistoryItem(BaseModel):
    id: str
    timestamp: Optional[datetime] = None
    globalResult: Optional[GlobalResult] = None


class UserHistoryResponse(BaseModel):
    success: bool = True
    results: List[HistoryItem]


class SendSmsResponse(BaseModel):
    success: bool
    message: str
    code: Optional[str] = None


class VerifySmsResponse(BaseModel):
    success: bool
    verified: bool
    message: str


class MemberResponse(BaseModel):
    success: bool = True


class MemberCheckResponse(BaseModel):
    success: bool = True
    userData: Optional[Dict[str, Any]] = None
    message: str


class ShareResponse(BaseModel):
    success: bool = True
    shareId: str
    shareUrl: str


class SharedResultResponse(BaseModel):
    success: bool = True
    result: Dict[str, Any]


class AdminResponse(BaseModel):
    success: bool = True
    message: str
    usersUpdated: int = 0
    usersSkipped: int = 0
