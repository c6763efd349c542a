from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    text: str


class CategoryResult(BaseModel):
    mean: float
    sum: Optional[Union[int, float]] = None
    label: str
    description: str


class GlobalResult(BaseModel):
    mean: float
    label: str
    description: str


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    category_results: Dict[str, CategoryResult] = Field(alias="categoryResults")
    global_result: GlobalResult = Field(alias="globalResult")
    bai_result: CategoryResult = Field(alias="baiResult")

    def to_document(self) -> dict:
        """Wire/storage shape: camelCase keys, `sum` only where populated."""
        return self.model_dump(by_alias=True, exclude_none=True)
