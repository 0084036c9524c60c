"""File and folder operations: copy, rename, delete, create."""

from datetime import datetime
from typing import Optional, Sequence

from common.logging_config import get_logger
from sdk.addressing import (
    Destination,
    FileByID,
    FileByPath,
    FileRef,
    FolderByID,
    FolderByPath,
    FolderInFolder,
    FolderRef,
    NewFolderRef,
    ToFolder,
    ToName,
    ToPath,
    render,
)
from sdk.context import CallContext
from sdk.models import DeleteFolderRecursiveResult, FileResult, FolderResult
from sdk.options import ClientOption

logger = get_logger(__name__)

FILE_REFS = (FileByPath, FileByID)
FOLDER_REFS = (FolderByPath, FolderByID)
NEW_FOLDER_REFS = (FolderByPath, FolderInFolder)


def _unix_seconds(value: datetime) -> str:
    return str(int(value.timestamp()))


class FileOpsMixin:
    """Path-level operations of the client."""

    def copy_file(
        self,
        source: FileRef,
        to: Destination,
        overwrite: bool = True,
        mtime: Optional[datetime] = None,
        ctime: Optional[datetime] = None,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> FileResult:
        """
        Copy a file to a new, independent file.

        Args:
            source: FileByPath or FileByID
            to: ToPath, or ToFolder (keeps the source name when no name is given)
            overwrite: Replace an existing destination; when False an existing
                destination raises ConflictError
            mtime: Modification time to set on the copy
            ctime: Creation time to set on the copy (needs mtime as well)
            options: Extra client options for this call
            context: Cancellation / deadline context

        Returns:
            FileResult with the copy's metadata
        """
        params = render(source, FILE_REFS)
        params.update(render(to, (ToPath, ToFolder)))
        if not overwrite:
            params['noover'] = '1'
        if mtime is not None:
            params['mtime'] = _unix_seconds(mtime)
        if ctime is not None:
            params['ctime'] = _unix_seconds(ctime)

        reply = self._call('copyfile', params, options=options, context=context, address=source)
        result = FileResult.model_validate(reply)
        logger.info(f"Copied {source} to {to} [file_id={result.metadata.file_id}]")
        return result

    def rename_file(
        self,
        source: FileRef,
        to: Destination,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> FileResult:
        """
        Rename or move a file. An existing destination file is replaced.

        Returns:
            FileResult; metadata.deleted_file_id is the id of the replaced
            file, or None when nothing was overwritten
        """
        params = render(source, FILE_REFS)
        params.update(render(to, (ToPath, ToFolder, ToName)))

        reply = self._call('renamefile', params, options=options, context=context, address=source)
        result = FileResult.model_validate(reply)
        if result.metadata.deleted_file_id is not None:
            logger.info(f"Renaming {source} to {to} replaced file_id={result.metadata.deleted_file_id}")
        return result

    def delete_file(
        self,
        target: FileRef,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> FileResult:
        """Delete a file. metadata.is_deleted confirms the deletion."""
        reply = self._call(
            'deletefile', render(target, FILE_REFS), options=options, context=context, address=target
        )
        logger.info(f"Deleted file {target}")
        return FileResult.model_validate(reply)

    def create_folder(
        self,
        target: NewFolderRef,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> FolderResult:
        """Create a folder. Raises ConflictError if it exists."""
        reply = self._call(
            'createfolder', render(target, NEW_FOLDER_REFS), options=options, context=context, address=target
        )
        return FolderResult.model_validate(reply)

    def create_folder_if_not_exists(
        self,
        target: NewFolderRef,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> FolderResult:
        """Create a folder unless it exists; result.created tells which."""
        reply = self._call(
            'createfolderifnotexists', render(target, NEW_FOLDER_REFS),
            options=options, context=context, address=target,
        )
        return FolderResult.model_validate(reply)

    def delete_folder(
        self,
        target: FolderRef,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> FolderResult:
        """Delete an empty folder."""
        reply = self._call(
            'deletefolder', render(target, FOLDER_REFS), options=options, context=context, address=target
        )
        logger.info(f"Deleted folder {target}")
        return FolderResult.model_validate(reply)

    def delete_folder_recursive(
        self,
        target: FolderRef,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> DeleteFolderRecursiveResult:
        """
        Delete a folder and everything below it in a single server-side call.

        Returns:
            Counts of deleted files and folders
        """
        reply = self._call(
            'deletefolderrecursive', render(target, FOLDER_REFS),
            options=options, context=context, address=target,
        )
        result = DeleteFolderRecursiveResult.model_validate(reply)
        logger.info(
            f"Deleted folder {target} recursively "
            f"[files={result.deleted_files}, folders={result.deleted_folders}]"
        )
        return result
