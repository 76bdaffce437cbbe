"""Typed views of the YBA backup API responses.

Only the fields the workflow inspects are declared; everything else is kept
as extra data so the full document can be stored as the attempt's response.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommonBackupInfo(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    backup_uuid: Optional[str] = Field(None, alias="backupUUID")
    base_backup_uuid: Optional[str] = Field(None, alias="baseBackupUUID")
    state: Optional[str] = None


class BackupEntity(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    common_backup_info: Optional[CommonBackupInfo] = Field(None, alias="commonBackupInfo")


class BackupPage(BaseModel):
    """Response of the paged backup listing (``backups/page``)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    entities: list[BackupEntity] = Field(default_factory=list)
    has_next: bool = Field(False, alias="hasNext")
    total_count: int = Field(0, alias="totalCount")

    @property
    def latest(self) -> Optional[BackupEntity]:
        return self.entities[0] if self.entities else None


class BackupHandle(BaseModel):
    """Response of a backup submission — the task tracking the backup."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    task_uuid: Optional[str] = Field(None, alias="taskUUID")
    resource_uuid: Optional[str] = Field(None, alias="resourceUUID")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
