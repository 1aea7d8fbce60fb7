from pydantic import BaseModel, Field


class WorkspaceFile(BaseModel):
    path: str
    filename: str
    workspace: str
    line: int


class WorkspaceGroup(BaseModel):
    workspace: str
    files: list[WorkspaceFile] = Field(default_factory=list)
    count: int = 0


class WorkspaceListing(BaseModel):
    workspaces: list[WorkspaceGroup] = Field(default_factory=list)
    total_workspaces: int = 0
    total_files: int = 0
