"""Label-based extraction of single fields from free-form model text."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

_VALUE = r"[^\S\n]*(?P<value>.+?)(?=\.(?:\s|$)|[,;\r\n，。；]|$)"
_COLON = r"[^\S\n]*[*_]*[^\S\n]*[:：]"


def _en(label: str) -> re.Pattern[str]:
    """Compile an English label, matched on word boundaries."""
    return re.compile(rf"\b{label}{_COLON}{_VALUE}", re.IGNORECASE)


def _zh(label: str) -> re.Pattern[str]:
    """Compile a Chinese label, which has no word boundaries."""
    return re.compile(rf"{label}{_COLON}{_VALUE}")


# Order matters within each field: specific labels first.
DEFAULT_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "foodName": (
        _en(r"food[ _-]?name"),
        _en(r"name of (?:the )?food"),
        _en(r"food item"),
        _en(r"dish"),
        _en(r"food"),
        _zh(r"食物名称"),
        _zh(r"食品名称"),
        _zh(r"菜名"),
    ),
    "carbContent": (
        _en(r"carb(?:ohydrate)?s?[ _-]?content"),
        _en(r"carb(?:ohydrate)?s?[ _-]?level"),
        _en(r"carbohydrates?"),
        _en(r"carbs?"),
        _zh(r"碳水化合物[^:：\n]{0,8}"),
        _zh(r"碳水[^:：\n]{0,8}"),
    ),
    "suitabilityIndex": (
        _en(r"suitability[ _-]?index"),
        _en(r"blood[ -]sugar suitability"),
        _en(r"suitability"),
        _en(r"suitable for[^:：\n]{0,40}?"),
        _zh(r"适合[^:：\n]{0,16}"),
        _zh(r"适宜[^:：\n]{0,16}"),
    ),
    "recommendedAmount": (
        _en(r"recommended[ _-]?amount"),
        _en(r"recommended (?:portion|serving)(?: size)?"),
        _en(r"serving size"),
        _en(r"portion"),
        _zh(r"建议食用量"),
        _zh(r"推荐食用量"),
        _zh(r"建议[^:：\n]{0,4}份量"),
    ),
    "nutrients": (
        _en(r"(?:key|main) nutrients"),
        _en(r"nutrients"),
        _en(r"nutritional value"),
        _en(r"nutrition"),
        _zh(r"营养价值"),
        _zh(r"营养成分"),
        _zh(r"营养素"),
        _zh(r"营养(?!师)[^:：\n师]{0,6}"),
    ),
    "healthTips": (
        _en(r"health[ _-]?tips?"),
        _en(r"healthy eating tips?"),
        _en(r"dietary (?:tips?|advice)"),
        _en(r"tips?"),
        _en(r"advice"),
        _zh(r"[^:：\n]{0,8}贴士"),
        _zh(r"饮食建议"),
    ),
}


@dataclass
class FieldExtractor:
    """Find the value of a labelled field in unstructured text."""

    patterns: Mapping[str, tuple[re.Pattern[str], ...]] = field(
        default_factory=lambda: DEFAULT_PATTERNS
    )

    def extract(self, field_key: str, raw_text: object) -> str | None:
        """Return the first labelled value for a field, or None."""
        text = as_text(raw_text)
        if not text:
            return None
        for pattern in self.patterns.get(field_key, ()):
            match = pattern.search(text)
            if match is None:
                continue
            value = match.group("value").strip().strip("*_\"'“”").strip()
            if value:
                return value
        return None


def as_text(raw_text: object) -> str:
    """Return model output as text, decoding bytes leniently."""
    if isinstance(raw_text, str):
        return raw_text
    if isinstance(raw_text, (bytes, bytearray)):
        return bytes(raw_text).decode("utf-8", errors="replace")
    return ""
