# src/api/routes/package_router.py
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from api.dependencies import optional_bearer_token, require_bearer_token
from catalog.schemas import SearchResult
from catalog.service import PackageService
from core.config.settings import settings
from core.containers.app_containers import AppContainer
from core.errors import BadRequest

router = APIRouter(prefix="/packages", tags=["Packages"])


def _check_limit(limit: int) -> None:
    if limit > settings.SEARCH_MAX_LIMIT:
        raise BadRequest(
            f"Query limit exceeded {settings.SEARCH_MAX_LIMIT} elements. "
            f"Please pass in a value less than or equal to {settings.SEARCH_MAX_LIMIT}"
        )
    if limit < 1:
        raise BadRequest("Query limit must be at least 1")


@router.get("/search", response_model=SearchResult)
@inject
async def search_packages(
    name: Optional[str] = Query(None),
    limit: int = Query(100),
    topic: Optional[str] = Query(None),
    token: str = Depends(require_bearer_token),
    service: PackageService = Depends(Provide[AppContainer.package_service]),
):
    if not name:
        raise BadRequest("Missing required query parameter 'name'")
    _check_limit(limit)

    return await service.search(name=name, limit=limit, token=token, topic=topic)


@router.get("/{owner}/{repo}")
@inject
async def get_package(
    owner: str,
    repo: str,
    token: Optional[str] = Depends(optional_bearer_token),
    service: PackageService = Depends(Provide[AppContainer.package_service]),
):
    metadata = await service.get_package(owner, repo, token=token)
    return JSONResponse(content=metadata, media_type="application/json")


@router.get("/{owner}/{repo}/readme")
@inject
async def get_readme(
    owner: str,
    repo: str,
    token: str = Depends(require_bearer_token),
    service: PackageService = Depends(Provide[AppContainer.package_service]),
):
    text = await service.readme(owner, repo, token)
    return Response(content=text.encode("utf-8"), media_type="text/markdown; charset=UTF-8")


@router.get("/{owner}/{repo}/manifest")
@inject
async def get_manifest(
    owner: str,
    repo: str,
    token: str = Depends(require_bearer_token),
    service: PackageService = Depends(Provide[AppContainer.package_service]),
):
    return await service.manifest(owner, repo, token)


@router.get("/{owner}/{repo}/releases")
@inject
async def get_releases(
    owner: str,
    repo: str,
    limit: int = Query(100),
    token: str = Depends(require_bearer_token),
    service: PackageService = Depends(Provide[AppContainer.package_service]),
):
    _check_limit(limit)
    releases = await service.releases(owner, repo, token, limit=limit)
    return JSONResponse(content=releases, media_type="application/json")
