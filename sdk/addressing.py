"""Address references: files and folders by path or by id, and move/copy destinations.

Each reference type holds exactly one addressing mode, checked at construction.
render() turns a reference into the request parameters for that mode.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type, Union

from sdk.exceptions import AddressError


def _check_path(path) -> None:
    if not isinstance(path, str) or not path.startswith('/'):
        raise AddressError(f"path must be an absolute string path, got {path!r}")


def _check_id(value, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise AddressError(f"{what} must be a non-negative integer, got {value!r}")


def _check_name(name) -> None:
    if not isinstance(name, str) or not name or '/' in name:
        raise AddressError(f"name must be a non-empty string without '/', got {name!r}")


@dataclass(frozen=True)
class FolderByPath:
    path: str

    def __post_init__(self):
        _check_path(self.path)


@dataclass(frozen=True)
class FolderByID:
    folder_id: int

    def __post_init__(self):
        _check_id(self.folder_id, 'folder_id')


@dataclass(frozen=True)
class FolderInFolder:
    """A folder named `name` inside the folder `parent_folder_id`."""
    parent_folder_id: int
    name: str

    def __post_init__(self):
        _check_id(self.parent_folder_id, 'parent_folder_id')
        _check_name(self.name)


@dataclass(frozen=True)
class FileByPath:
    path: str

    def __post_init__(self):
        _check_path(self.path)


@dataclass(frozen=True)
class FileByID:
    file_id: int

    def __post_init__(self):
        _check_id(self.file_id, 'file_id')


@dataclass(frozen=True)
class FileInFolder:
    """A file named `name` inside the folder `folder_id`."""
    folder_id: int
    name: str

    def __post_init__(self):
        _check_id(self.folder_id, 'folder_id')
        _check_name(self.name)


@dataclass(frozen=True)
class ToPath:
    """Destination given as a full target path."""
    path: str

    def __post_init__(self):
        _check_path(self.path)


@dataclass(frozen=True)
class ToName:
    """Destination keeping the source's folder under a new name."""
    name: str

    def __post_init__(self):
        _check_name(self.name)


@dataclass(frozen=True)
class ToFolder:
    """Destination inside folder `folder_id`, optionally under a new name."""
    folder_id: int
    name: Optional[str] = None

    def __post_init__(self):
        _check_id(self.folder_id, 'folder_id')
        if self.name is not None:
            _check_name(self.name)


FolderRef = Union[FolderByPath, FolderByID]
NewFolderRef = Union[FolderByPath, FolderInFolder]
FileRef = Union[FileByPath, FileByID]
OpenFileRef = Union[FileByPath, FileByID, FileInFolder]
Destination = Union[ToPath, ToName, ToFolder]
Reference = Union[
    FolderByPath, FolderByID, FolderInFolder,
    FileByPath, FileByID, FileInFolder,
    ToPath, ToName, ToFolder,
]


def destination(
    path: Optional[str] = None,
    folder_id: Optional[int] = None,
    name: Optional[str] = None,
) -> Destination:
    """
    Build a destination from loose fields.

    Exactly one shape is accepted: path alone, name alone, or folder_id
    with an optional name.

    Raises:
        AddressError: If no shape or more than one shape is given
    """
    if path is not None:
        if folder_id is not None or name is not None:
            raise AddressError("destination path cannot be combined with folder_id or name")
        return ToPath(path)
    if folder_id is not None:
        return ToFolder(folder_id, name)
    if name is not None:
        return ToName(name)
    raise AddressError("destination needs a path, a name, or a folder_id")


def render(
    reference: Reference,
    accepted: Optional[Tuple[Type, ...]] = None,
) -> Dict[str, str]:
    """
    Render a reference into request parameters.

    Args:
        reference: Address reference
        accepted: Reference types the target operation supports; None allows all

    Returns:
        Parameter dict holding only the keys of the reference's mode

    Raises:
        AddressError: If the reference is not of an accepted type
    """
    if accepted is not None and not isinstance(reference, accepted):
        names = ', '.join(t.__name__ for t in accepted)
        raise AddressError(f"expected one of {names}, got {reference!r}", address=reference)

    match reference:
        case FolderByPath(path=path) | FileByPath(path=path):
            return {'path': path}
        case FolderByID(folder_id=folder_id):
            return {'folderid': str(folder_id)}
        case FileByID(file_id=file_id):
            return {'fileid': str(file_id)}
        case FolderInFolder(parent_folder_id=folder_id, name=name) | FileInFolder(folder_id=folder_id, name=name):
            return {'folderid': str(folder_id), 'name': name}
        case ToPath(path=path):
            return {'topath': path}
        case ToName(name=name):
            return {'toname': name}
        case ToFolder(folder_id=folder_id, name=None):
            return {'tofolderid': str(folder_id)}
        case ToFolder(folder_id=folder_id, name=name):
            return {'tofolderid': str(folder_id), 'toname': name}
        case _:
            raise AddressError(f"not an address reference: {reference!r}", address=reference)
