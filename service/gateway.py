from abc import ABC, abstractmethod
from typing import List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from db.models import GradeRecord, utcnow
from dto.request.grade_records import GradeRecordCreateRequest, GradeRecordUpdateRequest
from logger import logger
from service.errors import DuplicateRecord, RecordNotFound, StorageError


class AbstractGradeRecordGateway(ABC):
    """CRUD operations over the grade records of one collection, keyed by name."""

    async def ensure_indexes(self) -> None:
        pass

    @abstractmethod
    async def list_all(self) -> List[GradeRecord]: ...

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[GradeRecord]: ...

    @abstractmethod
    async def create(self, create_dto: GradeRecordCreateRequest) -> GradeRecord: ...

    @abstractmethod
    async def update(
        self, name: str, update_dto: GradeRecordUpdateRequest
    ) -> GradeRecord: ...

    @abstractmethod
    async def delete(self, name: str) -> GradeRecord: ...

    @abstractmethod
    async def find_by_average_range(
        self, minimum: float, maximum: float
    ) -> List[GradeRecord]: ...

    @abstractmethod
    async def count(self) -> int: ...


class MongoGradeRecordGateway(AbstractGradeRecordGateway):
    collection: AsyncCollection

    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_index(
                [("name", ASCENDING)], unique=True, name="name_unique"
            )
            await self.collection.create_index([("average", DESCENDING)], name="average")
        except PyMongoError as e:
            raise StorageError(f"error creating indexes: {e}", detail=str(e)) from e

    async def list_all(self) -> List[GradeRecord]:
        try:
            cursor = self.collection.find().sort("name", ASCENDING)
            documents = await cursor.to_list()
        except PyMongoError as e:
            raise StorageError(f"error listing students: {e}", detail=str(e)) from e
        return [GradeRecord.from_document(document) for document in documents]

    async def find_by_name(self, name: str) -> Optional[GradeRecord]:
        try:
            document = await self.collection.find_one({"name": name})
        except PyMongoError as e:
            raise StorageError(f"error fetching student: {e}", detail=str(e)) from e
        if document is None:
            return None
        return GradeRecord.from_document(document)

    async def create(self, create_dto: GradeRecordCreateRequest) -> GradeRecord:
        # the unique index is authoritative, this only avoids a failed insert
        if await self.find_by_name(create_dto.name) is not None:
            raise DuplicateRecord(create_dto.name)

        now = utcnow()
        record = GradeRecord(**create_dto.model_dump(), created_at=now, updated_at=now)
        try:
            await self.collection.insert_one(record.to_document())
        except DuplicateKeyError as e:
            raise DuplicateRecord(create_dto.name) from e
        except PyMongoError as e:
            raise StorageError(f"error creating student: {e}", detail=str(e)) from e

        logger.info(f"Created student '{record.name}' with average {record.average}")
        return record

    async def update(
        self, name: str, update_dto: GradeRecordUpdateRequest
    ) -> GradeRecord:
        current = await self.find_by_name(name)
        if current is None:
            raise RecordNotFound(name)

        updated = current.with_grades(
            **update_dto.model_dump(exclude_none=True), now=utcnow()
        )
        changes = {
            "grade1": updated.grade1,
            "grade2": updated.grade2,
            "grade3": updated.grade3,
            "average": updated.average,
            "updated_at": updated.updated_at,
        }
        try:
            document = await self.collection.find_one_and_update(
                {"name": name},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageError(f"error updating student: {e}", detail=str(e)) from e
        if document is None:
            raise RecordNotFound(name)

        logger.info(f"Updated student '{name}', average is now {updated.average}")
        return GradeRecord.from_document(document)

    async def delete(self, name: str) -> GradeRecord:
        try:
            document = await self.collection.find_one_and_delete({"name": name})
        except PyMongoError as e:
            raise StorageError(f"error deleting student: {e}", detail=str(e)) from e
        if document is None:
            raise RecordNotFound(name)

        logger.info(f"Deleted student '{name}'")
        return GradeRecord.from_document(document)

    async def find_by_average_range(
        self, minimum: float, maximum: float
    ) -> List[GradeRecord]:
        try:
            cursor = self.collection.find(
                {"average": {"$gte": minimum, "$lte": maximum}}
            ).sort("average", DESCENDING)
            documents = await cursor.to_list()
        except PyMongoError as e:
            raise StorageError(
                f"error searching students by average: {e}", detail=str(e)
            ) from e
        return [GradeRecord.from_document(document) for document in documents]

    async def count(self) -> int:
        try:
            return await self.collection.count_documents({})
        except PyMongoError as e:
            raise StorageError(f"error counting students: {e}", detail=str(e)) from e
