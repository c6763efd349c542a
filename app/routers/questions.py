from typing import List

from fastapi import APIRouter, Depends

from app.dependencies import get_catalog, get_config
from app.models.report_models import Question
from app.utils.scoring import ReportConfig

router = APIRouter()


@router.get("/questions", response_model=List[Question])
def list_questions(questions: List[Question] = Depends(get_catalog)):
    return questions


@router.get("/report-config")
def report_config(config: ReportConfig = Depends(get_config)):
    return config.raw
