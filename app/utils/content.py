import json
from functools import lru_cache
from pathlib import Path
from typing import List, Sequence

from pydantic import ValidationError

from app.models.report_models import Question
from app.utils.errors import ConfigurationError
from app.utils.logger import logger
from app.utils.scoring import (
    FALLBACK_DESCRIPTION,
    FALLBACK_LABEL,
    ReportConfig,
    Unbounded,
    parse_threshold_entry,
)

QUESTIONS_FILE = "questions.json"
REPORT_CONFIG_FILE = "report-config.json"
DEFAULT_ANXIETY_SUM_CATEGORY = "BAI 불안척도"


def _read_json(path: Path):
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Content file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def load_questions(path: Path) -> List[Question]:
    data = _read_json(path)
    if not isinstance(data, list):
        raise ConfigurationError(f"{path} must contain a JSON array of questions")

    try:
        questions = [Question.model_validate(item) for item in data]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid question in {path}: {e}") from e

    seen = set()
    for q in questions:
        if q.id in seen:
            raise ConfigurationError(f"Duplicate question id: {q.id}")
        seen.add(q.id)

    return questions


def _parse_rule_set(name: str, entries) -> tuple:
    if not isinstance(entries, list):
        raise ConfigurationError(f"Threshold rule set '{name}' must be a list")
    parsed = tuple(parse_threshold_entry(e) for e in entries)
    for entry in parsed:
        if isinstance(entry, Unbounded):
            logger.warning(f"Threshold '{entry.label}' in '{name}' has no bounds and will never match")
    return parsed


def _global_categories(raw: dict) -> List[str]:
    if "globalCompositeCategories" in raw:
        return list(raw["globalCompositeCategories"])

    # Legacy layout: the scale entry carrying a `categories` list
    for scale in raw.get("scales", []):
        if isinstance(scale, dict) and scale.get("categories"):
            logger.warning("report-config has no globalCompositeCategories; using legacy scales[].categories")
            return list(scale["categories"])

    raise ConfigurationError("report-config does not define globalCompositeCategories")


def build_report_config(raw: dict, questions: Sequence[Question]) -> ReportConfig:
    """Validate a parsed report-config document against the question catalog."""
    if not isinstance(raw, dict):
        raise ConfigurationError("report-config must be a JSON object")

    thresholds = raw.get("thresholds")
    if not isinstance(thresholds, dict):
        raise ConfigurationError("report-config is missing 'thresholds'")

    raw_categories = thresholds.get("categories")
    if not isinstance(raw_categories, dict):
        raise ConfigurationError("report-config is missing 'thresholds.categories'")

    category_thresholds = {
        category: _parse_rule_set(category, entries)
        for category, entries in raw_categories.items()
    }
    global_thresholds = _parse_rule_set("globalAverage", thresholds.get("globalAverage", []))

    anxiety_sum_category = raw.get("anxietySumCategory", DEFAULT_ANXIETY_SUM_CATEGORY)
    global_categories = _global_categories(raw)

    for category in {q.category for q in questions}:
        if category not in category_thresholds:
            raise ConfigurationError(f"Catalog category '{category}' has no thresholds")
    for category in global_categories:
        if category not in category_thresholds:
            raise ConfigurationError(f"Global composite category '{category}' has no thresholds")
    if anxiety_sum_category not in category_thresholds:
        raise ConfigurationError(f"Anxiety-sum category '{anxiety_sum_category}' has no thresholds")
    if anxiety_sum_category in global_categories:
        raise ConfigurationError("Anxiety-sum category cannot be part of the global composite")

    fallback = raw.get("fallback") or {}

    return ReportConfig(
        category_thresholds=category_thresholds,
        global_thresholds=global_thresholds,
        global_categories=tuple(global_categories),
        anxiety_sum_category=anxiety_sum_category,
        fallback_label=fallback.get("label", FALLBACK_LABEL),
        fallback_description=fallback.get("description", FALLBACK_DESCRIPTION),
        raw=raw,
    )


def load_report_config(path: Path, questions: Sequence[Question]) -> ReportConfig:
    return build_report_config(_read_json(path), questions)


@lru_cache()
def get_questions(content_dir: Path) -> List[Question]:
    questions = load_questions(Path(content_dir) / QUESTIONS_FILE)
    logger.info(f"Loaded {len(questions)} questions from {content_dir}")
    return questions


@lru_cache()
def get_report_config(content_dir: Path) -> ReportConfig:
    config = load_report_config(Path(content_dir) / REPORT_CONFIG_FILE, get_questions(content_dir))
    logger.info(
        f"Loaded report config: {len(config.category_thresholds)} categories, "
        f"global composite over {len(config.global_categories)}"
    )
    return config
