from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

PASSING_AVERAGE = 7.0

_ONE_DECIMAL = Decimal("0.1")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_average(grade1: float, grade2: float, grade3: float) -> float:
    """Mean of the three grades rounded half-up to one decimal place.

    Grades go through ``str`` so that 7.1 is summed as 7.1 and not as its
    binary approximation.
    """
    total = Decimal(str(grade1)) + Decimal(str(grade2)) + Decimal(str(grade3))
    return float((total / 3).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def is_passing(average: float, threshold: float = PASSING_AVERAGE) -> bool:
    return average >= threshold


class GradeRecord(BaseModel):
    """A student's three grades as stored in the ``students`` collection.

    ``average`` is derived on every dump, so a record can never be written
    with a stale average and a stored average is never read back.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    grade1: float
    grade2: float
    grade3: float
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="before")
    @classmethod
    def stamp_new_record(cls, data: Any) -> Any:
        # a new record is created and last updated at the same instant
        if isinstance(data, dict) and "updated_at" not in data:
            data = {**data}
            data.setdefault("created_at", utcnow())
            data["updated_at"] = data["created_at"]
        return data

    @computed_field
    @property
    def average(self) -> float:
        return compute_average(self.grade1, self.grade2, self.grade3)

    def is_passing(self, threshold: float = PASSING_AVERAGE) -> bool:
        return is_passing(self.average, threshold)

    def with_grades(
        self,
        grade1: Optional[float] = None,
        grade2: Optional[float] = None,
        grade3: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> "GradeRecord":
        return GradeRecord(
            name=self.name,
            grade1=self.grade1 if grade1 is None else grade1,
            grade2=self.grade2 if grade2 is None else grade2,
            grade3=self.grade3 if grade3 is None else grade3,
            created_at=self.created_at,
            updated_at=now or utcnow(),
        )

    def to_document(self) -> dict:
        return self.model_dump()

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "GradeRecord":
        return cls.model_validate(
            {key: value for key, value in document.items() if key != "_id"}
        )
