from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SearchMetadata(BaseModel):
    total_count: int = 0
    end_cursor: Optional[str] = None
    has_next_page: bool = False


class SearchResult(BaseModel):
    # repository nodes exactly as GitHub returned them
    repositories: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: SearchMetadata = Field(default_factory=SearchMetadata)
