import httpx
from dependency_injector import containers, providers

from catalog.service import PackageService
from catalog.sources.github.graphql_client import GitHubGraphQLClient
from catalog.sources.github.raw_client import GitHubRawClient
from catalog.sources.github.rest_client import GitHubRestClient
from core.config.settings import settings


class AppContainer(containers.DeclarativeContainer):

    http_client = providers.Singleton(
        httpx.AsyncClient,
        timeout=settings.HTTP_TIMEOUT,
        headers={"User-Agent": settings.APP_NAME},
    )

    raw_client = providers.Factory(
        GitHubRawClient,
        http_client=http_client,
        base_url=settings.GITHUB_RAW_URL,
        branch=settings.MANIFEST_BRANCH,
        manifest_file=settings.MANIFEST_FILE,
    )

    rest_client = providers.Factory(
        GitHubRestClient,
        base_url=settings.GITHUB_API_URL,
        timeout=settings.HTTP_TIMEOUT,
    )

    graphql_client = providers.Factory(
        GitHubGraphQLClient,
        http_client=http_client,
        endpoint=settings.GITHUB_GRAPHQL_URL,
    )

    package_service = providers.Factory(
        PackageService,
        raw_client=raw_client,
        rest_client=rest_client,
        graphql_client=graphql_client,
        manifest_branch=settings.MANIFEST_BRANCH,
        manifest_file=settings.MANIFEST_FILE,
        search_language=settings.SEARCH_LANGUAGE,
    )
