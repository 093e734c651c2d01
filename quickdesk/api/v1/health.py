"""Health check for load balancers: always 200, with database reachability in the body."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quickdesk import __version__
from quickdesk.core.config import Settings, get_settings
from quickdesk.core.database import check_db_connected, get_db
from quickdesk.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        version=__version__,
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
    )
