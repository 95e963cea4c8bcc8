# src/catalog/sources/github/raw_client.py

import httpx

from core.errors import UpstreamError, UpstreamTimeout
from core.logging.logger import get_logger


class GitHubRawClient:
    """
    raw.githubusercontent.com access.
    Used to confirm a repository ships a package manifest.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        branch: str = "master",
        manifest_file: str = "Package.swift",
    ):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.branch = branch
        self.manifest_file = manifest_file
        self.logger = get_logger(__name__)

    def manifest_url(self, owner: str, repo: str) -> str:
        return f"{self.base_url}/{owner}/{repo}/{self.branch}/{self.manifest_file}"

    async def manifest_exists(self, owner: str, repo: str) -> bool:
        """
        True on 2xx, False on 404.
        Any other status is relayed as UpstreamError.
        """
        url = self.manifest_url(owner, repo)
        try:
            response = await self.http_client.get(url)
        except httpx.TimeoutException as e:
            self.logger.warning(f"Manifest probe timed out for {owner}/{repo}: {e}")
            raise UpstreamTimeout(f"Timed out fetching {self.manifest_file} for '{owner}/{repo}'")
        except httpx.HTTPError as e:
            self.logger.error(f"Manifest probe failed for {owner}/{repo}: {e}")
            raise UpstreamError(f"Failed to reach {self.base_url}: {e}")

        if response.is_success:
            return True
        if response.status_code == 404:
            return False

        self.logger.warning(
            f"Manifest probe for {owner}/{repo} returned {response.status_code} {response.reason_phrase}"
        )
        raise UpstreamError.from_status(response.status_code, response.reason_phrase)
