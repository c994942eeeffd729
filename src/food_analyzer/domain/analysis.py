"""Models for normalized food analysis results."""

from pydantic import BaseModel, ConfigDict, Field

FIELD_KEYS: tuple[str, ...] = (
    "foodName",
    "carbContent",
    "suitabilityIndex",
    "recommendedAmount",
    "nutrients",
    "healthTips",
)

PLACEHOLDERS: dict[str, str] = {
    "foodName": "Unrecognized food",
    "carbContent": "unknown",
    "suitabilityIndex": "undetermined",
    "recommendedAmount": "reference amount unavailable",
    "nutrients": "nutrients not identified",
    "healthTips": "Consider asking a dietitian for personalized advice",
}

REFUSAL_VALUES: dict[str, str] = {
    "foodName": "Unrecognized food",
    "carbContent": "unknown",
    "suitabilityIndex": "undetermined",
    "recommendedAmount": "undetermined",
    "nutrients": "unknown",
    "healthTips": "Try again with a clearer photo of the food",
}


class AnalysisRecord(BaseModel):
    """Six-field nutritional summary for one photographed food."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    food_name: str = Field(alias="foodName", min_length=1)
    carb_content: str = Field(alias="carbContent", min_length=1)
    suitability_index: str = Field(alias="suitabilityIndex", min_length=1)
    recommended_amount: str = Field(alias="recommendedAmount", min_length=1)
    nutrients: str = Field(alias="nutrients", min_length=1)
    health_tips: str = Field(alias="healthTips", min_length=1)

    def to_wire(self) -> dict[str, str]:
        """Return the record keyed by its camelCase field names."""
        return self.model_dump(by_alias=True)


def refusal_record() -> AnalysisRecord:
    """Return the record used when the model declines to analyze an image."""
    return AnalysisRecord.model_validate(REFUSAL_VALUES)
