# src/catalog/service.py

import asyncio
from typing import Any, Dict, List, Optional

from catalog.manifest.parser import parse_manifest
from catalog.mappers.search_mapper import map_search
from catalog.schemas import SearchResult
from catalog.sources.github.filters import build_search_query
from catalog.sources.github.graphql_client import GitHubGraphQLClient
from catalog.sources.github.queries import ManifestQuery, READMEQuery, ReleasesQuery, SearchQuery
from catalog.sources.github.raw_client import GitHubRawClient
from catalog.sources.github.rest_client import GitHubRestClient
from core.errors import NotFound
from core.logging.logger import get_logger


class PackageService:
    """
    Package catalog use-cases.
    Each method maps one inbound endpoint onto its GitHub calls.
    """

    def __init__(
        self,
        raw_client: GitHubRawClient,
        rest_client: GitHubRestClient,
        graphql_client: GitHubGraphQLClient,
        manifest_branch: str = "master",
        manifest_file: str = "Package.swift",
        search_language: Optional[str] = None,
    ):
        self.raw_client = raw_client
        self.rest_client = rest_client
        self.graphql_client = graphql_client
        self.manifest_branch = manifest_branch
        self.manifest_file = manifest_file
        self.search_language = search_language or None
        self.logger = get_logger(__name__)

    @staticmethod
    def _not_found(owner: str, repo: str) -> NotFound:
        return NotFound(f"No package found with name '{owner}/{repo}'")

    async def get_package(self, owner: str, repo: str, token: Optional[str] = None) -> Dict[str, Any]:
        """
        1) manifest probe on the raw content host
        2) repository metadata from the REST API
        """
        if not await self.raw_client.manifest_exists(owner, repo):
            self.logger.info(f"No {self.manifest_file} for {owner}/{repo}")
            raise self._not_found(owner, repo)

        metadata = await asyncio.to_thread(self.rest_client.get_repository, f"{owner}/{repo}", token)
        if not metadata:
            raise self._not_found(owner, repo)
        return metadata

    async def search(
        self,
        name: str,
        limit: int,
        token: str,
        topic: Optional[str] = None,
    ) -> SearchResult:
        options = {}
        if topic:
            options["topic"] = topic

        query = build_search_query(name, language=self.search_language, options=options)
        self.logger.info(f"Searching packages: {query!r} (limit={limit})")

        search = await self.graphql_client.send(SearchQuery(query=query, limit=limit), token)
        result = map_search(search)

        self.logger.info(
            f"Found {result.metadata.total_count} repositories, returning {len(result.repositories)}"
        )
        return result

    async def readme(self, owner: str, repo: str, token: str) -> str:
        return await self.graphql_client.send(READMEQuery(owner=owner, repo=repo), token)

    async def manifest(self, owner: str, repo: str, token: str) -> Dict[str, Any]:
        query = ManifestQuery(
            owner=owner,
            repo=repo,
            branch=self.manifest_branch,
            manifest_file=self.manifest_file,
        )
        text = await self.graphql_client.send(query, token)
        return parse_manifest(text)

    async def releases(self, owner: str, repo: str, token: str, limit: int = 100) -> List[Dict[str, Any]]:
        return await self.graphql_client.send(ReleasesQuery(owner=owner, repo=repo, limit=limit), token)
