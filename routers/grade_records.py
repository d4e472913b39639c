from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from starlette import status

from db.models import GradeRecord
from dto.response.grade_records import (
    ApiInfoResponse,
    GradeRecordEnvelope,
    GradeRecordListEnvelope,
    GradeRecordResponseBase,
)
from service.errors import RecordNotFound
from service.gateway import AbstractGradeRecordGateway
from service.validation import validate_average_range, validate_create, validate_update

API_VERSION = "1.0.0"

grade_records_router = APIRouter(tags=["Grades"])


def get_gateway(request: Request) -> AbstractGradeRecordGateway:
    return request.app.state.gateway


Gateway = Annotated[AbstractGradeRecordGateway, Depends(get_gateway)]


def to_response(record: GradeRecord) -> GradeRecordResponseBase:
    return GradeRecordResponseBase(**record.model_dump())


@grade_records_router.get("/", response_model=ApiInfoResponse)
async def api_info() -> ApiInfoResponse:
    return ApiInfoResponse(
        message="Student grades API is running",
        version=API_VERSION,
        endpoints={
            "list": "GET /notas",
            "get": "GET /notas/:name",
            "create": "POST /notas/inserir",
            "update": "PUT /editar/:name",
            "delete": "DELETE /excluir/:name",
            "by_average": "GET /media?min=&max=",
        },
    )


@grade_records_router.get(
    "/notas",
    response_model=GradeRecordListEnvelope,
    response_model_exclude_none=True,
)
async def list_grade_records(gateway: Gateway) -> GradeRecordListEnvelope:
    records = await gateway.list_all()
    return GradeRecordListEnvelope(
        success=True,
        total=len(records),
        data=[to_response(record) for record in records],
    )


@grade_records_router.post(
    "/notas/inserir",
    status_code=status.HTTP_201_CREATED,
    response_model=GradeRecordEnvelope,
    response_model_exclude_none=True,
)
async def create_grade_record(
    gateway: Gateway, payload: Annotated[Any, Body()]
) -> GradeRecordEnvelope:
    create_dto = validate_create(payload)
    record = await gateway.create(create_dto)
    return GradeRecordEnvelope(
        success=True,
        message="student created successfully",
        data=to_response(record),
    )


@grade_records_router.get(
    "/notas/{name}",
    response_model=GradeRecordEnvelope,
    response_model_exclude_none=True,
)
async def get_grade_record(name: str, gateway: Gateway) -> GradeRecordEnvelope:
    record = await gateway.find_by_name(name.strip())
    if record is None:
        raise RecordNotFound(name)
    return GradeRecordEnvelope(success=True, data=to_response(record))


@grade_records_router.put(
    "/editar/{name}",
    response_model=GradeRecordEnvelope,
    response_model_exclude_none=True,
)
async def update_grade_record(
    name: str, gateway: Gateway, payload: Annotated[Any, Body()]
) -> GradeRecordEnvelope:
    update_dto = validate_update(payload)
    record = await gateway.update(name.strip(), update_dto)
    return GradeRecordEnvelope(
        success=True,
        message="student updated successfully",
        data=to_response(record),
    )


@grade_records_router.delete(
    "/excluir/{name}",
    response_model=GradeRecordEnvelope,
    response_model_exclude_none=True,
)
async def delete_grade_record(name: str, gateway: Gateway) -> GradeRecordEnvelope:
    record = await gateway.delete(name.strip())
    return GradeRecordEnvelope(
        success=True,
        message="student deleted successfully",
        data=to_response(record),
    )


@grade_records_router.get(
    "/media",
    response_model=GradeRecordListEnvelope,
    response_model_exclude_none=True,
)
async def list_grade_records_by_average(
    gateway: Gateway,
    minimum: Annotated[Optional[str], Query(alias="min")] = None,
    maximum: Annotated[Optional[str], Query(alias="max")] = None,
) -> GradeRecordListEnvelope:
    query = validate_average_range(minimum, maximum)
    records = await gateway.find_by_average_range(query.minimum, query.maximum)
    return GradeRecordListEnvelope(
        success=True,
        total=len(records),
        data=[to_response(record) for record in records],
    )
