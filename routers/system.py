from datetime import datetime, timezone

from fastapi import APIRouter, Request

from dto.response.grade_records import HealthResponse

system_router = APIRouter(tags=["System"])


@system_router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    database = request.app.state.database
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        # an injected gateway runs without a managed connection
        database=database.status if database is not None else "unmanaged",
    )
