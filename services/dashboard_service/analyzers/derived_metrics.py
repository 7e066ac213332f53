import math

SEO_VISIBILITY_FLOOR = 30
SEO_VISIBILITY_CEILING = 98
FORM_BONUS = 10
SEO_VISIBILITY_WEIGHT = 0.75

CONVERSION_WITH_FORM = 0.11
CONVERSION_WITHOUT_FORM = 0.06

LIGHTHOUSE_TARGET = 75


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimated_seo_visibility(lighthouse: int, has_form: bool) -> int:
    adjusted = lighthouse + (FORM_BONUS if has_form else -FORM_BONUS)
    raw = round_half_up(adjusted * SEO_VISIBILITY_WEIGHT)
    return max(SEO_VISIBILITY_FLOOR, min(SEO_VISIBILITY_CEILING, raw))


def conversion_rate(has_form: bool) -> float:
    return CONVERSION_WITH_FORM if has_form else CONVERSION_WITHOUT_FORM


def critical_issues(has_form: bool) -> int:
    return 0 if has_form else 1


def high_priority_issues(lighthouse: int) -> int:
    return 2 if lighthouse < LIGHTHOUSE_TARGET else 1
