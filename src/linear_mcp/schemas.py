"""Pydantic argument models, one per tool.

Tool arguments arrive as camelCase JSON (the MCP tool schemas use Linear's
field names). Models accept those aliases and dump back to camelCase for the
GraphQL inputs.
"""
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ToolArguments(BaseModel):
    """Base for every tool argument model."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_input(self) -> dict:
        """Dump set fields with Linear's camelCase names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class EmptyArgs(ToolArguments):
    """Tools without parameters."""


# Auth

class AuthArgs(ToolArguments):
    client_id: str = Field(..., alias="clientId", min_length=1)
    client_secret: str = Field(..., alias="clientSecret", min_length=1)
    redirect_uri: str = Field(..., alias="redirectUri", min_length=1)


class AuthCallbackArgs(ToolArguments):
    code: str = Field(..., min_length=1)
    state: Optional[str] = None


# Issues

class IssueFields(ToolArguments):
    """Optional issue attributes shared by single and batch creation."""

    description: Optional[str] = None
    assignee_id: Optional[str] = Field(None, alias="assigneeId")
    state_id: Optional[str] = Field(None, alias="stateId")
    priority: Optional[int] = Field(None, ge=0, le=4)
    label_ids: Optional[list[str]] = Field(None, alias="labelIds")
    project_id: Optional[str] = Field(None, alias="projectId")


class CreateIssueArgs(IssueFields):
    team_id: str = Field(..., alias="teamId", min_length=1)
    title: str = Field(..., min_length=1)


class IssueInput(IssueFields):
    title: str = Field(..., min_length=1)


class CreateIssuesArgs(ToolArguments):
    team_id: str = Field(..., alias="teamId", min_length=1)
    issues: list[IssueInput] = Field(..., min_length=1)


class IssueUpdate(ToolArguments):
    title: Optional[str] = None
    description: Optional[str] = None
    state_id: Optional[str] = Field(None, alias="stateId")
    assignee_id: Optional[str] = Field(None, alias="assigneeId")
    priority: Optional[int] = Field(None, ge=0, le=4)
    label_ids: Optional[list[str]] = Field(None, alias="labelIds")
    project_id: Optional[str] = Field(None, alias="projectId")


class BulkUpdateIssuesArgs(ToolArguments):
    issue_ids: list[str] = Field(..., alias="issueIds", min_length=1)
    update: IssueUpdate


class SearchIssuesArgs(ToolArguments):
    query: str
    team_id: Optional[str] = Field(None, alias="teamId")
    limit: Optional[int] = Field(None, ge=1, le=250)
    include_archived: bool = Field(False, alias="includeArchived")


class GetIssueArgs(ToolArguments):
    issue_id: str = Field(..., alias="issueId", min_length=1)


class DeleteIssueArgs(ToolArguments):
    id: str = Field(..., min_length=1)


class DeleteIssuesArgs(ToolArguments):
    ids: list[str] = Field(..., min_length=1)


# Projects

class ProjectInput(ToolArguments):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    team_ids: list[str] = Field(..., alias="teamIds", min_length=1)


class ProjectIssueInput(ToolArguments):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    team_id: str = Field(..., alias="teamId", min_length=1)


class CreateProjectWithIssuesArgs(ToolArguments):
    project: ProjectInput
    issues: list[ProjectIssueInput]


class GetProjectArgs(ToolArguments):
    id: str = Field(..., min_length=1)
    include_issues: bool = Field(False, alias="includeIssues")


class SearchProjectsArgs(ToolArguments):
    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "query"))
    team_ids: Optional[list[str]] = Field(None, validation_alias=AliasChoices("teamIds", "team_ids"))
    first: Optional[int] = Field(None, ge=1, le=250, validation_alias=AliasChoices("first", "limit"))
    include_archived: bool = Field(
        False, validation_alias=AliasChoices("includeArchived", "include_archived")
    )


class GetProjectsArgs(ToolArguments):
    team_id: Optional[str] = Field(None, alias="teamId")
    filter: Optional[str] = None
    include_archived: bool = Field(False, alias="includeArchived")


# Teams

class TeamArgs(ToolArguments):
    team_id: str = Field(..., alias="teamId", min_length=1)
