# src/catalog/sources/github/rest_client.py

from typing import Optional

import requests
from github import Auth, Github, GithubException, UnknownObjectException

from core.errors import UpstreamError, UpstreamTimeout
from core.logging.logger import get_logger


class GitHubRestClient:
    """
    Low-level GitHub REST v3 wrapper.
    Only responsible for HTTP communication.

    PyGithub is synchronous; callers run it through asyncio.to_thread.
    """

    def __init__(self, base_url: str, timeout: float):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = get_logger(__name__)

    def _client(self, token: Optional[str]) -> Github:
        auth = Auth.Token(token) if token else None
        # retry=None: failures go straight back to the caller
        return Github(auth=auth, base_url=self.base_url, timeout=int(self.timeout), retry=None)

    def get_repository(self, full_name: str, token: Optional[str] = None) -> Optional[dict]:
        """
        Core API: repository metadata as returned by GET /repos/{owner}/{repo}

        Args:
            full_name: owner/repo
            token: caller's bearer token, forwarded when present
        Returns:
            raw JSON document or None if the repository does not exist
        """
        client = self._client(token)
        try:
            repo = client.get_repo(full_name)
            return repo.raw_data
        except UnknownObjectException:
            self.logger.info(f"Repository {full_name} not found")
            return None
        except GithubException as e:
            message = e.data.get("message") if isinstance(e.data, dict) else None
            self.logger.error(f"GitHub API error ({e.status}) for {full_name}: {message or e}")
            raise UpstreamError.from_status(e.status)
        except requests.exceptions.Timeout as e:
            self.logger.warning(f"Repository request timed out for {full_name}: {e}")
            raise UpstreamTimeout(f"Timed out fetching repository metadata for '{full_name}'")
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Repository request failed for {full_name}: {e}")
            raise UpstreamError(f"Failed to reach {self.base_url}: {e}")
        finally:
            client.close()
