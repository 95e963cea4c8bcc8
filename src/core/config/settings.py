from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    APP_NAME: str = "PackageCatalogAPI"
    DEBUG: bool = False

    HOST: str = "0.0.0.0"
    PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # ===== GitHub =====
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_GRAPHQL_URL: str = "https://api.github.com/graphql"
    GITHUB_RAW_URL: str = "https://raw.githubusercontent.com"

    # Manifest probe / ManifestQuery target
    MANIFEST_BRANCH: str = "master"
    MANIFEST_FILE: str = "Package.swift"

    # Search
    SEARCH_LANGUAGE: str = "swift"
    SEARCH_MAX_LIMIT: int = 100

    # httpx default timeout
    HTTP_TIMEOUT: float = 5.0


settings = AppSettings()
