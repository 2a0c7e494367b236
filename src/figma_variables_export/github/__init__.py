"""GitHub Git Data API publishing"""

from .client import GitHubClient, GitHubResponse, create_http_session
from .commit_builder import (
    CommitBuilder,
    CommitStep,
    build_commit_message,
    encode_content,
    format_timestamp,
)
from .models import CommitPlan, ExportResult, TreeEntry

__all__ = [
    "CommitBuilder",
    "CommitPlan",
    "CommitStep",
    "ExportResult",
    "GitHubClient",
    "GitHubResponse",
    "TreeEntry",
    "build_commit_message",
    "create_http_session",
    "encode_content",
    "format_timestamp",
]
