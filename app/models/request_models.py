from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class UserInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    phone: Optional[str] = None
    name: Optional[str] = None


class ResultRequest(BaseModel):
    # null marks an unanswered item
    answers: Dict[str, Optional[Union[int, float]]] = Field(default_factory=dict)
    userInfo: Optional[UserInfo] = None


class SendSmsRequest(BaseModel):
    phoneNumber: str = ""


class VerifySmsRequest(BaseModel):
    phone: str = ""
    code: str = ""


class MemberRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    phone: str = ""
    childAge: Union[str, int, None] = None
    childGender: Optional[str] = None
    parentAgeGroup: Optional[str] = None
    caregiverType: Optional[str] = None
    region: Optional[str] = None
    privacyAgreed: Optional[bool] = None
    marketingAgreed: Optional[bool] = None

    def missing_required(self):
        required = ("name", "phone", "childAge", "childGender", "parentAgeGroup", "caregiverType")
        return [key for key in required if not getattr(self, key)]


class ShareRequest(BaseModel):
    """Result snapshot to share. Extra keys (userInfo, resultId...) are kept."""
    model_config = ConfigDict(extra="allow")

    categoryResults: Dict[str, Any]
    globalResult: Dict[str, Any]
    baiResult: Dict[str, Any]
