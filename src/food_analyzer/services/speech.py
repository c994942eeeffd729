"""Plain-text spoken summaries of analysis records."""

from food_analyzer.domain.analysis import AnalysisRecord

RECOMMENDED = "Recommended"
MODERATION = "Eat in moderation"
NOT_RECOMMENDED = "Not recommended"
ASK_DIETITIAN = "Ask a dietitian for advice"

# Checked in order; the first group with a matching keyword wins.
SUITABILITY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (NOT_RECOMMENDED, ("not suitable", "unsuitable", "avoid", "不适合", "避免")),
    (RECOMMENDED, ("moderat", "suitable", "low", "适量", "适合", "低")),
    (MODERATION, ("caution", "small", "medium", "谨慎", "少量", "中")),
    (NOT_RECOMMENDED, ("high", "高")),
)


def classify_suitability(suitability_index: str) -> str:
    """Reduce a free-form suitability answer to a short piece of advice."""
    lowered = suitability_index.lower()
    for advice, keywords in SUITABILITY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return advice
    return ASK_DIETITIAN


def build_speech_text(record: AnalysisRecord) -> str:
    """Return a short summary suitable for a text-to-speech engine."""
    return "\n".join(
        (
            f"Food: {record.food_name}.",
            f"Advice: {classify_suitability(record.suitability_index)}.",
            f"Carbohydrate content: {record.carb_content}.",
            f"Recommended amount: {record.recommended_amount}.",
            f"Tip: {record.health_tips}",
        )
    )
