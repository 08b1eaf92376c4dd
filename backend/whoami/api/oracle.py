"""
Oracle API endpoints - Model readiness
"""

from fastapi import APIRouter
from pydantic import BaseModel

from whoami.llm.client import get_model_string
from whoami.llm.oracle import get_oracle
from whoami.models.game import OracleStatus

router = APIRouter()


class OracleStatusResponse(BaseModel):
    """Current readiness of the shared oracle"""

    status: OracleStatus
    model: str
    error: str | None = None


def _status_response() -> OracleStatusResponse:
    oracle = get_oracle()
    return OracleStatusResponse(
        status=oracle.status,
        model=oracle.model or get_model_string(),
        error=oracle.error,
    )


@router.get("/status", response_model=OracleStatusResponse)
async def oracle_status():
    """Get the oracle's initialization status"""
    return _status_response()


@router.post("/initialize", response_model=OracleStatusResponse)
async def initialize_oracle():
    """Initialize the oracle (no-op when already ready)"""
    await get_oracle().initialize()
    return _status_response()
