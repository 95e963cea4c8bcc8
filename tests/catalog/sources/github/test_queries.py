import pytest

from catalog.sources.github.queries import (
    README_CANDIDATES,
    ManifestQuery,
    READMEQuery,
    ReleasesQuery,
    SearchQuery,
)
from core.errors import NotFound


class TestSearchQuery:
    def test_variables(self):
        query = SearchQuery(query="vapor in:name", limit=25)
        assert query.variables() == {"query": "vapor in:name", "first": 25}
        assert "search(query: $query, type: REPOSITORY, first: $first)" in query.document

    def test_decode_missing_search_is_empty(self):
        assert SearchQuery(query="x").decode({}) == {}


class TestREADMEQuery:
    def test_document_has_one_lookup_per_candidate(self):
        document = READMEQuery(owner="vapor", repo="vapor").document
        for index, filename in enumerate(README_CANDIDATES):
            assert f'readme{index}: object(expression: "HEAD:{filename}")' in document

    def test_decode_returns_first_existing_readme(self):
        query = READMEQuery(owner="vapor", repo="vapor")
        data = {"repository": {"readme0": None, "readme1": {"text": "# lower-case readme"}, "readme2": None}}
        assert query.decode(data) == "# lower-case readme"

    def test_empty_readme_is_returned(self):
        query = READMEQuery(owner="vapor", repo="vapor")
        assert query.decode({"repository": {"readme0": {"text": ""}}}) == ""

    def test_missing_readme_is_not_found(self):
        query = READMEQuery(owner="vapor", repo="vapor")
        with pytest.raises(NotFound) as exc_info:
            query.decode({"repository": {}})
        assert "vapor/vapor" in exc_info.value.reason

    def test_missing_repository_is_not_found(self):
        with pytest.raises(NotFound):
            READMEQuery(owner="octocat", repo="nope").decode({"repository": None})


class TestManifestQuery:
    def test_expression_targets_branch_and_file(self):
        query = ManifestQuery(owner="apple", repo="swift-nio")
        assert query.variables() == {
            "owner": "apple",
            "name": "swift-nio",
            "expression": "master:Package.swift",
        }

    def test_decode_returns_text(self):
        query = ManifestQuery(owner="apple", repo="swift-nio")
        assert query.decode({"repository": {"object": {"text": "let package = Package()"}}}) == (
            "let package = Package()"
        )

    def test_missing_manifest_is_not_found(self):
        query = ManifestQuery(owner="apple", repo="swift-nio", branch="main")
        with pytest.raises(NotFound) as exc_info:
            query.decode({"repository": {"object": None}})
        assert "main" in exc_info.value.reason


class TestReleasesQuery:
    def test_decode_keeps_upstream_order_and_fields(self):
        nodes = [{"tagName": "2.0.0", "isDraft": False}, {"tagName": "1.0.0", "isDraft": False}]
        query = ReleasesQuery(owner="vapor", repo="vapor")
        assert query.decode({"repository": {"releases": {"nodes": nodes}}}) == nodes

    def test_no_releases(self):
        query = ReleasesQuery(owner="vapor", repo="vapor")
        assert query.decode({"repository": {"releases": {"nodes": []}}}) == []

    def test_default_limit(self):
        assert ReleasesQuery(owner="vapor", repo="vapor").variables()["first"] == 100
