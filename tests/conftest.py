from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from config import Settings
from db.models import GradeRecord
from dto.request.grade_records import GradeRecordCreateRequest, GradeRecordUpdateRequest
from main import create_app
from service.errors import DuplicateRecord, RecordNotFound, StorageError
from service.gateway import AbstractGradeRecordGateway


class InMemoryGradeRecordGateway(AbstractGradeRecordGateway):
    def __init__(self):
        self.records: Dict[str, GradeRecord] = {}

    async def list_all(self) -> List[GradeRecord]:
        return sorted(self.records.values(), key=lambda record: record.name)

    async def find_by_name(self, name: str) -> Optional[GradeRecord]:
        return self.records.get(name)

    async def create(self, create_dto: GradeRecordCreateRequest) -> GradeRecord:
        if create_dto.name in self.records:
            raise DuplicateRecord(create_dto.name)
        record = GradeRecord(**create_dto.model_dump())
        self.records[record.name] = record
        return record

    async def update(self, name: str, update_dto: GradeRecordUpdateRequest) -> GradeRecord:
        current = self.records.get(name)
        if current is None:
            raise RecordNotFound(name)
        updated = current.with_grades(**update_dto.model_dump(exclude_none=True))
        self.records[name] = updated
        return updated

    async def delete(self, name: str) -> GradeRecord:
        record = self.records.pop(name, None)
        if record is None:
            raise RecordNotFound(name)
        return record

    async def find_by_average_range(self, minimum: float, maximum: float) -> List[GradeRecord]:
        matching = [r for r in self.records.values() if minimum <= r.average <= maximum]
        return sorted(matching, key=lambda record: record.average, reverse=True)

    async def count(self) -> int:
        return len(self.records)


class UnavailableGradeRecordGateway(InMemoryGradeRecordGateway):
    async def list_all(self) -> List[GradeRecord]:
        raise StorageError(
            "error listing students: connection refused", detail="connection refused"
        )


class BrokenGradeRecordGateway(InMemoryGradeRecordGateway):
    async def find_by_name(self, name: str) -> Optional[GradeRecord]:
        raise RuntimeError("unexpected failure")


@pytest.fixture
def settings() -> Settings:
    return Settings(mongodb_uri="mongodb://localhost:27017", app_env="test")


@pytest.fixture
def production_settings() -> Settings:
    return Settings(mongodb_uri="mongodb://localhost:27017", app_env="production")


@pytest.fixture
def gateway() -> InMemoryGradeRecordGateway:
    return InMemoryGradeRecordGateway()


@pytest.fixture
def test_client(settings, gateway):
    app = create_app(settings, gateway=gateway)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def add_record(gateway):
    def _add_record(name: str, grade1: float, grade2: float, grade3: float) -> GradeRecord:
        record = GradeRecord(name=name, grade1=grade1, grade2=grade2, grade3=grade3)
        gateway.records[name] = record
        return record

    return _add_record


@pytest.fixture
def ana(add_record) -> GradeRecord:
    return add_record("Ana", 8.0, 7.5, 9.0)


@pytest.fixture
def beto(add_record) -> GradeRecord:
    return add_record("Beto", 5.0, 5.0, 5.0)


@pytest.fixture
def unavailable_client(settings):
    app = create_app(settings, gateway=UnavailableGradeRecordGateway())
    with TestClient(app) as client:
        yield client


@pytest.fixture
def broken_client(settings):
    app = create_app(settings, gateway=BrokenGradeRecordGateway())
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def production_unavailable_client(production_settings):
    app = create_app(production_settings, gateway=UnavailableGradeRecordGateway())
    with TestClient(app) as client:
        yield client


@pytest.fixture
def production_broken_client(production_settings):
    app = create_app(production_settings, gateway=BrokenGradeRecordGateway())
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
