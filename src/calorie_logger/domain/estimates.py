"""Result schemas for language-model stage outputs."""

from pydantic import BaseModel, Field, RootModel


class NameList(RootModel[list[str]]):
    """Ordered list of dish or ingredient names."""

    def names(self) -> list[str]:
        """Return stripped, non-blank names in their original order."""
        return [name.strip() for name in self.root if name and name.strip()]


class PortionEstimate(BaseModel):
    """Portion size suggested by the model."""

    grams: float = Field(gt=0, allow_inf_nan=False)
    portion: str | None = None


class CalorieEstimate(BaseModel):
    """Calorie figure suggested by the model, validated later."""

    calories: float | str | None
