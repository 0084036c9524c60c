"""Client SDK for the pCloud storage API."""

from sdk.addressing import (
    FileByID,
    FileByPath,
    FileInFolder,
    FolderByID,
    FolderByPath,
    FolderInFolder,
    ToFolder,
    ToName,
    ToPath,
    destination,
)
from sdk.auth import PasswordAuth, TokenAuth
from sdk.client import Client
from sdk.config import Config
from sdk.context import CallContext
from sdk.descriptors import (
    O_APPEND,
    O_CREAT,
    O_EXCL,
    O_TRUNC,
    O_WRITE,
    SEEK_CUR,
    SEEK_END,
    SEEK_SET,
    OpenFlag,
    RemoteFile,
    Whence,
)
from sdk.transport import Transport

__all__ = [
    "Client",
    "Config",
    "Transport",
    "CallContext",
    "TokenAuth",
    "PasswordAuth",
    "RemoteFile",
    "OpenFlag",
    "Whence",
    "O_WRITE",
    "O_CREAT",
    "O_EXCL",
    "O_TRUNC",
    "O_APPEND",
    "SEEK_SET",
    "SEEK_CUR",
    "SEEK_END",
    "FolderByPath",
    "FolderByID",
    "FolderInFolder",
    "FileByPath",
    "FileByID",
    "FileInFolder",
    "ToPath",
    "ToName",
    "ToFolder",
    "destination",
]
