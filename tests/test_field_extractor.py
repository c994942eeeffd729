"""Tests for label-based field extraction."""

import re

import pytest

from food_analyzer.services.extraction import DEFAULT_PATTERNS, FieldExtractor


def test_extracts_english_labels_up_to_sentence_end() -> None:
    extractor = FieldExtractor()
    text = "Food name: rice. Carb content: high."

    assert extractor.extract("foodName", text) == "rice"
    assert extractor.extract("carbContent", text) == "high"


def test_value_stops_at_comma_and_newline() -> None:
    extractor = FieldExtractor()
    text = "Recommended amount: half a cup, cooked\nNutrients: protein"

    assert extractor.extract("recommendedAmount", text) == "half a cup"
    assert extractor.extract("nutrients", text) == "protein"


def test_decimal_point_does_not_end_value() -> None:
    extractor = FieldExtractor()

    value = extractor.extract("recommendedAmount", "Serving size: 1.5 cups")

    assert value == "1.5 cups"


def test_extracts_chinese_labels() -> None:
    extractor = FieldExtractor()
    text = (
        "1. 食物名称：白米饭\n"
        "2. 碳水化合物含量：高\n"
        "3. 适合控制血糖人群食用指数：谨慎少量食用\n"
        "4. 建议食用量：半碗\n"
        "5. 营养价值：主要提供碳水化合物\n"
        "6. 健康饮食小贴士：搭配蔬菜一起食用"
    )

    assert extractor.extract("foodName", text) == "白米饭"
    assert extractor.extract("carbContent", text) == "高"
    assert extractor.extract("suitabilityIndex", text) == "谨慎少量食用"
    assert extractor.extract("recommendedAmount", text) == "半碗"
    assert extractor.extract("nutrients", text) == "主要提供碳水化合物"
    assert extractor.extract("healthTips", text) == "搭配蔬菜一起食用"


def test_generic_nutrition_label_does_not_capture_dietitian_advice() -> None:
    extractor = FieldExtractor()

    assert extractor.extract("nutrients", "营养师建议：少吃") is None


def test_specific_label_wins_over_generic() -> None:
    extractor = FieldExtractor()
    text = "Nutrition: see below\nKey nutrients: iron"

    assert extractor.extract("nutrients", text) == "iron"


def test_markdown_bold_labels_are_recognized() -> None:
    extractor = FieldExtractor()

    assert extractor.extract("foodName", "**Food name**: pancake") == "pancake"


@pytest.mark.parametrize(
    "raw_text",
    ["", "no labels here", None, b"\xff\xfe\x00garbage", 42, "Food name:   "],
)
def test_returns_none_without_a_value(raw_text: object) -> None:
    extractor = FieldExtractor()

    assert extractor.extract("foodName", raw_text) is None


def test_unknown_field_returns_none() -> None:
    assert FieldExtractor().extract("calories", "calories: 100") is None


def test_custom_pattern_table() -> None:
    extractor = FieldExtractor(
        patterns={"foodName": (re.compile(r"plat\s*:\s*(?P<value>[^.]+)"),)}
    )

    assert extractor.extract("foodName", "plat : ratatouille.") == "ratatouille"


def test_every_field_has_patterns() -> None:
    assert set(DEFAULT_PATTERNS) == {
        "foodName",
        "carbContent",
        "suitabilityIndex",
        "recommendedAmount",
        "nutrients",
        "healthTips",
    }
