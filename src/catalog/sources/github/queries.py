# src/catalog/sources/github/queries.py
"""
GraphQL documents sent to GitHub v4.

Each query knows its document, its variables and how to pull its result
out of the `data` member of the response.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from core.errors import NotFound


README_CANDIDATES: Tuple[str, ...] = (
    "README.md",
    "readme.md",
    "Readme.md",
    "README.markdown",
    "README",
)


SEARCH_DOCUMENT = """
query SearchRepositories($query: String!, $first: Int!) {
  search(query: $query, type: REPOSITORY, first: $first) {
    repositoryCount
    pageInfo {
      endCursor
      hasNextPage
    }
    nodes {
      ... on Repository {
        id
        name
        nameWithOwner
        description
        url
        stargazerCount
        forkCount
        isArchived
        isFork
        createdAt
        updatedAt
        pushedAt
        owner {
          login
        }
        licenseInfo {
          spdxId
          name
        }
        primaryLanguage {
          name
        }
        repositoryTopics(first: 20) {
          nodes {
            topic {
              name
            }
          }
        }
      }
    }
  }
}
"""


MANIFEST_DOCUMENT = """
query Manifest($owner: String!, $name: String!, $expression: String!) {
  repository(owner: $owner, name: $name) {
    object(expression: $expression) {
      ... on Blob {
        text
      }
    }
  }
}
"""


RELEASES_DOCUMENT = """
query Releases($owner: String!, $name: String!, $first: Int!) {
  repository(owner: $owner, name: $name) {
    releases(first: $first, orderBy: {field: CREATED_AT, direction: DESC}) {
      nodes {
        name
        tagName
        description
        url
        isDraft
        isPrerelease
        isLatest
        createdAt
        publishedAt
        author {
          login
        }
      }
    }
  }
}
"""


def _readme_document(candidates: Tuple[str, ...]) -> str:
    # one aliased object lookup per candidate file name
    lookups = "\n".join(
        f'    readme{index}: object(expression: "HEAD:{filename}") {{ ... on Blob {{ text }} }}'
        for index, filename in enumerate(candidates)
    )
    return (
        "query Readme($owner: String!, $name: String!) {\n"
        "  repository(owner: $owner, name: $name) {\n"
        f"{lookups}\n"
        "  }\n"
        "}\n"
    )


def _repository(data: Dict[str, Any], owner: str, repo: str) -> Dict[str, Any]:
    repository = (data or {}).get("repository")
    if repository is None:
        raise NotFound(f"No repository found with name '{owner}/{repo}'")
    return repository


@dataclass(frozen=True)
class SearchQuery:
    query: str
    limit: int = 100

    document = SEARCH_DOCUMENT

    def variables(self) -> Dict[str, Any]:
        return {"query": self.query, "first": self.limit}

    def decode(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return (data or {}).get("search") or {}


@dataclass(frozen=True)
class READMEQuery:
    owner: str
    repo: str
    candidates: Tuple[str, ...] = README_CANDIDATES

    @property
    def document(self) -> str:
        return _readme_document(self.candidates)

    def variables(self) -> Dict[str, Any]:
        return {"owner": self.owner, "name": self.repo}

    def decode(self, data: Dict[str, Any]) -> str:
        repository = _repository(data, self.owner, self.repo)
        for index in range(len(self.candidates)):
            blob = repository.get(f"readme{index}")
            if blob and blob.get("text") is not None:
                return blob["text"]
        raise NotFound(f"No README found for '{self.owner}/{self.repo}'")


@dataclass(frozen=True)
class ManifestQuery:
    owner: str
    repo: str
    branch: str = "master"
    manifest_file: str = "Package.swift"

    document = MANIFEST_DOCUMENT

    def variables(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "name": self.repo,
            "expression": f"{self.branch}:{self.manifest_file}",
        }

    def decode(self, data: Dict[str, Any]) -> str:
        repository = _repository(data, self.owner, self.repo)
        blob: Optional[dict] = repository.get("object")
        if not blob or blob.get("text") is None:
            raise NotFound(
                f"No {self.manifest_file} found on '{self.branch}' for '{self.owner}/{self.repo}'"
            )
        return blob["text"]


@dataclass(frozen=True)
class ReleasesQuery:
    owner: str
    repo: str
    limit: int = 100

    document = RELEASES_DOCUMENT

    def variables(self) -> Dict[str, Any]:
        return {"owner": self.owner, "name": self.repo, "first": self.limit}

    def decode(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        repository = _repository(data, self.owner, self.repo)
        releases = repository.get("releases") or {}
        return releases.get("nodes") or []
