"""Export configuration model and loaders."""

import logging
import os
import re
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..constants import ConversionDefaults, GitHubAPIDefaults, GitHubExportDefaults
from ..error_handling import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("owner", "repo", "path", "token")

ENV_PREFIX = "FIGMA_EXPORT_"


class OutputLayout(str, Enum):
    SPLIT = "split"  # one file per section per theme
    SINGLE = "single"  # one variables.css per theme


class ExportConfig(BaseModel):
    """Everything one export needs; owner/repo/path/token come from the caller."""

    owner: str
    repo: str
    path: str
    token: str

    api_base_url: str = GitHubAPIDefaults.BASE_URL
    base_branch_candidates: List[str] = Field(
        default_factory=lambda: list(GitHubExportDefaults.BASE_BRANCH_CANDIDATES),
        min_length=1,
    )
    branch_prefix: str = GitHubExportDefaults.BRANCH_PREFIX
    timezone: str = GitHubExportDefaults.TIMEZONE
    max_branch_attempts: int = Field(GitHubExportDefaults.MAX_BRANCH_ATTEMPTS, ge=1)
    max_retries: int = Field(GitHubAPIDefaults.MAX_RETRIES, ge=0)
    backoff_factor: float = Field(GitHubAPIDefaults.BACKOFF_FACTOR, ge=0)
    max_backoff: float = Field(GitHubAPIDefaults.MAX_BACKOFF_SECONDS, ge=0)
    request_timeout: float = Field(GitHubAPIDefaults.REQUEST_TIMEOUT_SECONDS, gt=0)
    export_deadline: Optional[float] = Field(
        GitHubExportDefaults.EXPORT_DEADLINE_SECONDS, gt=0
    )
    chunk_size: int = Field(ConversionDefaults.VARIABLE_BATCH_SIZE, ge=1)
    syntax_batch_size: int = Field(ConversionDefaults.SYNTAX_BATCH_SIZE, ge=1)
    include_effect_categories: bool = False
    layout: OutputLayout = OutputLayout.SPLIT

    @field_validator("owner", "repo", "token")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("path")
    @classmethod
    def _normalise_path(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> "ExportConfig":
        """Build a config from environment variables plus explicit overrides."""
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {
            "owner": env.get(f"{ENV_PREFIX}OWNER", ""),
            "repo": env.get(f"{ENV_PREFIX}REPO", ""),
            "path": env.get(f"{ENV_PREFIX}PATH", ""),
            "token": env.get("GITHUB_TOKEN") or env.get(f"{ENV_PREFIX}TOKEN", ""),
        }
        optional = {
            "api_base_url": f"{ENV_PREFIX}API_BASE_URL",
            "branch_prefix": f"{ENV_PREFIX}BRANCH_PREFIX",
            "timezone": f"{ENV_PREFIX}TIMEZONE",
            "export_deadline": f"{ENV_PREFIX}DEADLINE",
            "layout": f"{ENV_PREFIX}LAYOUT",
        }
        for field_name, env_name in optional.items():
            if env.get(env_name):
                data[field_name] = env[env_name]
        if env.get(f"{ENV_PREFIX}BASE_BRANCHES"):
            data["base_branch_candidates"] = [
                name.strip()
                for name in env[f"{ENV_PREFIX}BASE_BRANCHES"].split(",")
                if name.strip()
            ]
        data.update({k: v for k, v in overrides.items() if v is not None})
        return validate_config(data)


_TOKEN_PATTERNS = [
    r"^ghp_[a-zA-Z0-9]{36}$",  # Personal access tokens (classic)
    r"^github_pat_[a-zA-Z0-9_]{82}$",  # Fine-grained personal access tokens
    r"^ghs_[a-zA-Z0-9]{36}$",  # GitHub App installation tokens
    r"^ghu_[a-zA-Z0-9]{36}$",  # GitHub App user tokens
]


def looks_like_github_token(token: str) -> bool:
    if not token or len(token.strip()) == 0:
        return False
    return any(re.match(pattern, token.strip()) for pattern in _TOKEN_PATTERNS)


def validate_config(data: Any) -> ExportConfig:
    """
    Validate raw configuration data.

    Raises:
        ConfigError: naming every missing or invalid field.
    """
    if isinstance(data, ExportConfig):
        config = data
    else:
        try:
            config = ExportConfig.model_validate(data)
        except ValidationError as e:
            problems = []
            for error in e.errors():
                field_name = ".".join(str(part) for part in error["loc"])
                if field_name in REQUIRED_FIELDS:
                    problems.append(f"GitHub {field_name} is not set")
                else:
                    problems.append(f"{field_name}: {error['msg']}")
            logger.error(f"Invalid export configuration: {problems}")
            raise ConfigError(
                "Invalid export configuration:\n- " + "\n- ".join(problems)
            ) from e

    if not looks_like_github_token(config.token):
        logger.warning("⚠️ GitHub token format appears invalid")
    return config
