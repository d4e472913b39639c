import re
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    model_validator,
)

# letters, Latin-1 accented letters and whitespace
NAME_PATTERN = re.compile(r"^[a-zA-ZÀ-ÿ\s]+$")


def _letters_only(value: str) -> str:
    if not NAME_PATTERN.match(value):
        raise ValueError("name must contain only letters and spaces")
    return value


def _reject_booleans(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("grade must be a number")
    return value


def _one_decimal_place(value: float) -> float:
    if Decimal(str(value)).as_tuple().exponent < -1:
        raise ValueError("grade must have at most one decimal place")
    return value


StudentName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=3, max_length=100),
    AfterValidator(_letters_only),
]

Grade = Annotated[
    float,
    BeforeValidator(_reject_booleans),
    Field(ge=0, le=10, allow_inf_nan=False),
    AfterValidator(_one_decimal_place),
]


class GradeRecordCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: StudentName
    grade1: Grade
    grade2: Grade
    grade3: Grade


class GradeRecordUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    grade1: Optional[Grade] = None
    grade2: Optional[Grade] = None
    grade3: Optional[Grade] = None

    @model_validator(mode="after")
    def at_least_one_grade(self) -> "GradeRecordUpdateRequest":
        if self.grade1 is None and self.grade2 is None and self.grade3 is None:
            raise ValueError("at least one grade must be provided")
        return self


class AverageRangeQuery(BaseModel):
    minimum: float = Field(default=0, ge=0, le=10, allow_inf_nan=False)
    maximum: float = Field(default=10, ge=0, le=10, allow_inf_nan=False)

    @model_validator(mode="after")
    def maximum_not_below_minimum(self) -> "AverageRangeQuery":
        if self.maximum < self.minimum:
            raise ValueError("maximum average must be greater than or equal to minimum")
        return self
