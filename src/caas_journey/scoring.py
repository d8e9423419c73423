"""Career-adaptability (CAAS) questionnaire scoring."""
from caas_journey.models import CATEGORIES

ITEMS_PER_CATEGORY = 6
MAX_RATING = 5
MAX_TOTAL = ITEMS_PER_CATEGORY * MAX_RATING * len(CATEGORIES)  # 120

# (min_percent, label), ascending. A percent falls in the last band whose
# min_percent it reaches.
CATEGORY_BANDS = (
    (0.0, "Very Low"),
    (30.0, "Low"),
    (50.0, "Medium"),
    (70.0, "High"),
    (90.0, "Very High"),
)

CATEGORY_INFO = {
    "Very High": {"label": "Sangat Tinggi", "action": "Lolos otomatis", "passed": True},
    "High": {"label": "Tinggi", "action": "Lolos", "passed": True},
    "Medium": {"label": "Sedang", "action": "Perlu penguatan", "passed": False},
    "Low": {"label": "Rendah", "action": "Ulang materi + Remedial + retest", "passed": False},
    "Very Low": {"label": "Sangat Rendah", "action": "Ulang intensif", "passed": False},
}


def score_category(ratings: list | None) -> float:
    """Sum one category's ratings. A missing category counts as all zeros."""
    if not ratings:
        return 0
    return sum(ratings)


def calc_percent(total: float) -> float:
    """Percent of the maximum questionnaire total, unrounded."""
    return total / MAX_TOTAL * 100


def category_for_percent(percent: float, bands: tuple = CATEGORY_BANDS) -> str:
    label = bands[0][1]
    for min_percent, band_label in bands:
        if percent >= min_percent:
            label = band_label
        else:
            break
    return label


def category_info(label: str) -> dict:
    """Display label, recommended action and pass flag for a category."""
    return CATEGORY_INFO[label]


def evaluate_answers(answers: dict | None, bands: tuple = CATEGORY_BANDS) -> dict:
    """Score a full four-category questionnaire.

    Args:
        answers: Mapping of category name to its list of 1-5 ratings.
            Categories that are absent are scored as zero.
        bands: Category band table, ascending by min percent.

    Returns:
        Dict with per-category ``scores``, ``total``, ``percent`` (full
        precision) and qualitative ``category``.
    """
    answers = answers or {}
    scores = {name: score_category(answers.get(name)) for name in CATEGORIES}
    total = sum(scores.values())
    percent = calc_percent(total)
    return {
        "scores": scores,
        "total": total,
        "percent": percent,
        "category": category_for_percent(percent, bands),
    }


def display_percent(percent: float) -> int:
    return round(percent)


def is_passing(score: float, threshold: float) -> bool:
    return score >= threshold
