from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from app.models.report_models import CategoryResult, GlobalResult, Question, Report
from app.utils.scoring import (
    FALLBACK_DESCRIPTION,
    FALLBACK_LABEL,
    Number,
    ReportConfig,
    ThresholdEntry,
    get_severity,
    safe_mean,
)


def _to_number(value) -> Number:
    number = float(value)
    return int(number) if number.is_integer() else number


def aggregate_answers(questions: Sequence[Question], answers: Mapping[str, object]) -> Dict[str, List[Number]]:
    """
    Group answers by question category.

    Unanswered questions are skipped, not counted as 0. Values are not
    range-checked.
    """
    category_values: Dict[str, List[Number]] = {}
    for q in questions:
        value = answers.get(q.id)
        if value is None:
            continue
        category_values.setdefault(q.category, []).append(_to_number(value))
    return category_values


def category_statistic(values: Sequence[Number]) -> Tuple[float, Number]:
    """Returns (mean, sum); both are 0 for an empty category."""
    return safe_mean(values), sum(values)


def classify_categories(category_values: Mapping[str, Sequence[Number]], config: ReportConfig) -> Dict[str, CategoryResult]:
    results: Dict[str, CategoryResult] = {}
    for category, entries in config.category_thresholds.items():
        mean, total = category_statistic(category_values.get(category, []))

        if category == config.anxiety_sum_category:
            label, description = get_severity(total, entries, config.fallback)
            results[category] = CategoryResult(mean=mean, sum=total, label=label, description=description)
        else:
            label, description = get_severity(mean, entries, config.fallback)
            results[category] = CategoryResult(mean=mean, label=label, description=description)

    return results


def compute_global(
    category_results: Mapping[str, CategoryResult],
    global_categories: Sequence[str],
    global_thresholds: Sequence[ThresholdEntry],
    fallback: Optional[Tuple[str, str]] = None,
) -> GlobalResult:
    """Unweighted mean of the selected category means."""
    means = [category_results[c].mean for c in global_categories if c in category_results]
    mean = safe_mean(means)
    label, description = get_severity(mean, global_thresholds, fallback or (FALLBACK_LABEL, FALLBACK_DESCRIPTION))
    return GlobalResult(mean=mean, label=label, description=description)


def assemble_report(questions: Sequence[Question], answers: Mapping[str, object], config: ReportConfig) -> Report:
    category_values = aggregate_answers(questions, answers)
    category_results = classify_categories(category_values, config)
    global_result = compute_global(
        category_results,
        config.global_categories,
        config.global_thresholds,
        config.fallback,
    )

    return Report(
        category_results=category_results,
        global_result=global_result,
        bai_result=category_results[config.anxiety_sum_category],
    )
