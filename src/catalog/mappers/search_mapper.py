from catalog.schemas import SearchMetadata, SearchResult


def map_search(search: dict) -> SearchResult:
    page_info = search.get("pageInfo") or {}

    return SearchResult(
        # non-repository hits come back as empty objects
        repositories=[node for node in search.get("nodes") or [] if node],
        metadata=SearchMetadata(
            total_count=search.get("repositoryCount") or 0,
            end_cursor=page_info.get("endCursor"),
            has_next_page=bool(page_info.get("hasNextPage")),
        ),
    )
