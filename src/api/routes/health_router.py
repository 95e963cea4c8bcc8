# src/api/routes/health_router.py
import httpx
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends

from core.config.settings import settings
from core.containers.app_containers import AppContainer

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/")
@inject
async def health_check(
    client: httpx.AsyncClient = Depends(Provide[AppContainer.http_client]),
):
    # GitHub REST root answers without a token
    try:
        response = await client.get(settings.GITHUB_API_URL)
        github_status = "reachable" if response.is_success else "unreachable"
    except httpx.HTTPError:
        github_status = "unreachable"

    return {
        "status": "ok",
        "github": github_status,
    }
