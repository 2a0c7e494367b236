"""Pydantic models for the Git Data API commit sequence"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..constants import GitHubExportDefaults


class TreeEntry(BaseModel):
    path: str
    mode: str = GitHubExportDefaults.FILE_MODE
    type: Literal["blob"] = "blob"
    sha: str


class CommitPlan(BaseModel):
    """Objects of one export, filled in step by step.

    Nothing in a plan is visible on any branch until ``ref_updated`` is set.
    """

    base_branch: Optional[str] = None
    base_commit_sha: Optional[str] = None
    base_tree_sha: Optional[str] = None
    feature_branch: Optional[str] = None
    entries: List[TreeEntry] = Field(default_factory=list)
    new_tree_sha: Optional[str] = None
    new_commit_sha: Optional[str] = None
    commit_message: Optional[str] = None
    ref_updated: bool = False


class ExportResult(BaseModel):
    """Outcome reported to the caller; never raised."""

    success: bool
    message: str
    job_id: Optional[str] = None
    branch: Optional[str] = None
    commit_sha: Optional[str] = None
    files: List[str] = Field(default_factory=list)
    themes: List[str] = Field(default_factory=list)
    variable_count: int = 0
    diagnostics: List[str] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)
