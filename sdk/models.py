"""Pydantic models for API replies."""

from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class APIModel(BaseModel):
    """Base for reply models: API key names as aliases, unknown keys ignored."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class Metadata(APIModel):
    """Metadata of a file or folder."""
    name: str = ''
    path: Optional[str] = None
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    is_folder: bool = Field(False, alias='isfolder')
    file_id: Optional[int] = Field(None, alias='fileid')
    folder_id: Optional[int] = Field(None, alias='folderid')
    parent_folder_id: Optional[int] = Field(None, alias='parentfolderid')
    size: Optional[int] = None
    content_type: Optional[str] = Field(None, alias='contenttype')
    hash: Optional[int] = None
    is_deleted: bool = Field(False, alias='isdeleted')
    deleted_file_id: Optional[int] = Field(None, alias='deletedfileid')
    contents: Optional[List['Metadata']] = None

    @field_validator('created', 'modified', mode='before')
    @classmethod
    def parse_rfc2822(cls, value):
        # "Thu, 21 Mar 2013 18:31:45 +0000"
        if isinstance(value, str):
            return parsedate_to_datetime(value)
        return value


class FileResult(APIModel):
    """Reply of copyfile, renamefile and deletefile."""
    metadata: Metadata


class FolderResult(APIModel):
    """Reply of createfolder, createfolderifnotexists and deletefolder."""
    metadata: Metadata
    created: Optional[bool] = None


class DeleteFolderRecursiveResult(APIModel):
    deleted_files: int = Field(0, alias='deletedfiles')
    deleted_folders: int = Field(0, alias='deletedfolders')


class FileOpenResult(APIModel):
    fd: int
    file_id: int = Field(alias='fileid')


class FileSizeResult(APIModel):
    size: int
    offset: int


class UserInfo(APIModel):
    """Reply of userinfo; auth is set only when a token was requested."""
    user_id: Optional[int] = Field(None, alias='userid')
    email: Optional[str] = None
    email_verified: Optional[bool] = Field(None, alias='emailverified')
    premium: Optional[bool] = None
    quota: Optional[int] = None
    used_quota: Optional[int] = Field(None, alias='usedquota')
    language: Optional[str] = None
    auth: Optional[str] = None
