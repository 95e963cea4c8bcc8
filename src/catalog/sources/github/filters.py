# src/catalog/sources/github/filters.py

from typing import Dict, Optional


def build_search_query(
    name: str,
    language: Optional[str] = None,
    options: Optional[Dict[str, str]] = None,
) -> str:
    """
    GitHub search syntax for a package name lookup

    e.g. "vapor in:name language:swift topic:server"
    """
    parts = [f"{name.strip()} in:name"]

    if language:
        parts.append(f"language:{language}")

    for qualifier, value in (options or {}).items():
        value = value.strip()
        if not value:
            continue
        # multi-word values must be quoted
        if " " in value:
            value = f'"{value}"'
        parts.append(f"{qualifier}:{value}")

    return " ".join(parts)
