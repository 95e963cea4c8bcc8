# src/catalog/sources/github/graphql_client.py

from typing import Any, Protocol

import httpx

from core.errors import NotFound, UpstreamError, UpstreamTimeout
from core.logging.logger import get_logger


class GraphQLQuery(Protocol):
    document: str

    def variables(self) -> dict: ...

    def decode(self, data: dict) -> Any: ...


class GitHubGraphQLClient:
    """
    GitHub GraphQL v4 transport.
    The caller's token is forwarded on every request; nothing is cached.
    """

    def __init__(self, http_client: httpx.AsyncClient, endpoint: str):
        self.http_client = http_client
        self.endpoint = endpoint
        self.logger = get_logger(__name__)

    async def execute(self, document: str, variables: dict, token: str) -> dict:
        """
        POST a GraphQL document and return its `data` member

        Raises:
            UpstreamTimeout: GitHub did not answer in time
            UpstreamError: transport failure, non-2xx status or GraphQL errors
            NotFound: GraphQL reported a NOT_FOUND error
        """
        try:
            response = await self.http_client.post(
                self.endpoint,
                json={"query": document, "variables": variables},
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as e:
            self.logger.warning(f"GraphQL request timed out: {e}")
            raise UpstreamTimeout("Timed out waiting for the GitHub GraphQL API")
        except httpx.HTTPError as e:
            self.logger.error(f"GraphQL request failed: {e}")
            raise UpstreamError(f"Failed to reach the GitHub GraphQL API: {e}")

        if not response.is_success:
            self.logger.warning(
                f"GraphQL API returned {response.status_code} {response.reason_phrase}"
            )
            raise UpstreamError.from_status(response.status_code, response.reason_phrase)

        try:
            payload = response.json()
        except ValueError:
            self.logger.error("GraphQL API returned a non-JSON body")
            raise UpstreamError("GitHub GraphQL API returned an unreadable response")

        if not isinstance(payload, dict):
            self.logger.error(f"GraphQL API returned a {type(payload).__name__} instead of an object")
            raise UpstreamError("GitHub GraphQL API returned an unreadable response")

        errors = payload.get("errors") or []
        if errors:
            messages = "; ".join(error.get("message", "unknown error") for error in errors)
            if any(error.get("type") == "NOT_FOUND" for error in errors):
                raise NotFound(messages)
            self.logger.error(f"GraphQL errors: {messages}")
            raise UpstreamError(f"GitHub GraphQL API error: {messages}")

        return payload.get("data") or {}

    async def send(self, query: GraphQLQuery, token: str) -> Any:
        data = await self.execute(query.document, query.variables(), token)
        return query.decode(data)
