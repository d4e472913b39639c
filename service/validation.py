from typing import Any, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from dto.request.grade_records import (
    AverageRangeQuery,
    GradeRecordCreateRequest,
    GradeRecordUpdateRequest,
)
from service.errors import ValidationFailed

BODY_NOT_AN_OBJECT = "request body must be a JSON object"


def format_error(error: Mapping[str, Any]) -> str:
    if error.get("type") == "value_error" and "error" in error.get("ctx", {}):
        message = str(error["ctx"]["error"])
    elif error.get("type") == "missing":
        message = "field is required"
    else:
        message = error.get("msg", "invalid value")

    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    if not location:
        if error.get("type") == "missing":
            return "request body is required"
        return message
    return f"{'.'.join(location)}: {message}"


def format_errors(errors: Iterable[Mapping[str, Any]]) -> List[str]:
    return [format_error(error) for error in errors]


def _ensure_mapping(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValidationFailed([BODY_NOT_AN_OBJECT])
    return payload


def validate_create(payload: Any) -> GradeRecordCreateRequest:
    payload = _ensure_mapping(payload)
    try:
        return GradeRecordCreateRequest.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed(format_errors(e.errors())) from e


def validate_update(payload: Any) -> GradeRecordUpdateRequest:
    payload = _ensure_mapping(payload)
    try:
        return GradeRecordUpdateRequest.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed(format_errors(e.errors())) from e


def validate_average_range(
    minimum: Optional[Any] = None, maximum: Optional[Any] = None
) -> AverageRangeQuery:
    values = {}
    if minimum is not None:
        values["minimum"] = minimum
    if maximum is not None:
        values["maximum"] = maximum
    try:
        return AverageRangeQuery.model_validate(values)
    except ValidationError as e:
        raise ValidationFailed(format_errors(e.errors())) from e
