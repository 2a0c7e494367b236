"""GitHub Git Data API defaults."""

from typing import Final, Tuple


class GitHubAPIDefaults:
    """Connection defaults for the GitHub REST API."""

    BASE_URL: Final[str] = "https://api.github.com"
    ACCEPT_HEADER: Final[str] = "application/vnd.github+json"
    API_VERSION: Final[str] = "2022-11-28"
    USER_AGENT: Final[str] = "Figma-Variables-Export/1.0.0"
    REQUEST_TIMEOUT_SECONDS: Final[float] = 30.0
    MAX_RETRIES: Final[int] = 3
    BACKOFF_FACTOR: Final[float] = 0.5
    MAX_BACKOFF_SECONDS: Final[float] = 8.0
    RETRYABLE_STATUSES: Final[Tuple[int, ...]] = (429, 500, 502, 503, 504)


class GitHubExportDefaults:
    """Defaults for the branch and commit an export produces."""

    BASE_BRANCH_CANDIDATES: Final[Tuple[str, ...]] = ("master", "main")
    BRANCH_PREFIX: Final[str] = "feat/figma-variables-"
    TIMEZONE: Final[str] = "Europe/Berlin"
    MAX_BRANCH_ATTEMPTS: Final[int] = 3
    EXPORT_DEADLINE_SECONDS: Final[float] = 120.0
    FILE_MODE: Final[str] = "100644"
    COMMIT_TITLE_PREFIX: Final[str] = "feat(figma-variables): Figma variables exported"
