"""Remote file descriptors: open, read, write, seek and close files on the server.

The server keeps the open file; the client keeps the cursor. A descriptor's
offset only changes once the call that moves it has fully succeeded.
Reads and plain writes are sent at the client offset, so a call cancelled
after the server handled it cannot leave the two positions out of step.
"""

import enum
from typing import Any, Optional, Sequence

from common.constants import READ_TO_EOF
from common.logging_config import get_logger
from sdk.addressing import FileByID, FileByPath, FileInFolder, OpenFileRef, render
from sdk.context import CallContext
from sdk.exceptions import (
    DescriptorClosedError,
    DescriptorInvalidError,
    InvalidArgumentError,
    MisuseError,
    SDKError,
    TransportError,
)
from sdk.models import FileOpenResult, FileSizeResult
from sdk.options import ClientOption

logger = get_logger(__name__)


class OpenFlag(enum.IntFlag):
    NONE = 0
    O_WRITE = 0x0002
    O_CREAT = 0x0040
    O_EXCL = 0x0080
    O_TRUNC = 0x0200
    O_APPEND = 0x0400


class Whence(enum.IntEnum):
    SEEK_SET = 0
    SEEK_CUR = 1
    SEEK_END = 2


O_WRITE = OpenFlag.O_WRITE
O_CREAT = OpenFlag.O_CREAT
O_EXCL = OpenFlag.O_EXCL
O_TRUNC = OpenFlag.O_TRUNC
O_APPEND = OpenFlag.O_APPEND

SEEK_SET = Whence.SEEK_SET
SEEK_CUR = Whence.SEEK_CUR
SEEK_END = Whence.SEEK_END


class RemoteFile:
    """
    An open file on the server.

    Owned by the caller that opened it; not safe to use from several
    threads at once. Usable as a context manager, which closes it on exit
    if it is still open.
    """

    def __init__(self, client, fd: int, file_id: int, flags: OpenFlag, address: Any):
        self._client = client
        self.fd = fd
        self.file_id = file_id
        self.flags = flags
        self.address = address
        self.offset = 0
        self.closed = False

    def __repr__(self) -> str:
        state = 'closed' if self.closed else f'offset={self.offset}'
        return f"RemoteFile(fd={self.fd}, file_id={self.file_id}, {state})"

    def read(self, count: Optional[int] = None, context: Optional[CallContext] = None) -> bytes:
        return self._client.file_read(self, count, context=context)

    def write(self, data: bytes, context: Optional[CallContext] = None) -> int:
        return self._client.file_write(self, data, context=context)

    def seek(self, offset: int, whence: Whence = SEEK_SET, context: Optional[CallContext] = None) -> int:
        return self._client.file_seek(self, offset, whence, context=context)

    def tell(self) -> int:
        if self.closed:
            raise DescriptorClosedError("descriptor is closed", address=self.address)
        return self.offset

    def size(self, context: Optional[CallContext] = None) -> int:
        return self._client.file_size(self, context=context).size

    def truncate(self, length: int, context: Optional[CallContext] = None) -> None:
        self._client.file_truncate(self, length, context=context)

    def close(self, context: Optional[CallContext] = None) -> None:
        self._client.file_close(self, context=context)

    def __enter__(self) -> 'RemoteFile':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if not self.closed:
            self.close()


class DescriptorMixin:
    """File descriptor operations of the client."""

    def _ensure_usable(self, f: RemoteFile, method: str) -> None:
        if not isinstance(f, RemoteFile) or f._client is not self:
            raise MisuseError("descriptor was not opened by this client", method=method)
        if f.closed:
            raise DescriptorClosedError("descriptor is closed", method=method, address=f.address)

    def file_open(
        self,
        flags: OpenFlag,
        target: OpenFileRef,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> RemoteFile:
        """
        Open a file on the server.

        O_CREAT creates a missing file; with O_EXCL as well, an existing
        file is a conflict. O_TRUNC empties the file. With O_APPEND the
        cursor starts at the end of the file.

        Args:
            flags: OpenFlag bits
            target: FileByPath, FileByID, or FileInFolder (needs O_CREAT to create)
            options: Extra client options for this call
            context: Cancellation / deadline context

        Returns:
            RemoteFile positioned at offset 0, or at end of file with O_APPEND

        Raises:
            ConflictError: O_CREAT|O_EXCL and the file exists
            NotFoundError: The file does not exist and O_CREAT was not given
        """
        flags = OpenFlag(flags)
        params = render(target, (FileByPath, FileByID, FileInFolder))
        params['flags'] = str(int(flags))

        reply = self._call('file_open', params, options=options, context=context, address=target)
        result = FileOpenResult.model_validate(reply)
        f = RemoteFile(self, result.fd, result.file_id, flags, target)
        logger.debug(f"Opened {target} as fd={f.fd} file_id={f.file_id} flags={flags!r}")

        if flags & O_APPEND:
            try:
                f.offset = self.file_size(f, context=context).size
            except SDKError:
                self._abandon(f)
                raise
        return f

    def _abandon(self, f: RemoteFile) -> None:
        """Close a descriptor the caller never received; close errors are logged, not raised."""
        f.closed = True
        try:
            self._call('file_close', {'fd': str(f.fd)}, address=f.address)
        except SDKError as e:
            logger.warning(f"Could not close fd={f.fd} after failed open: {e}")

    def file_read(
        self,
        f: RemoteFile,
        count: Optional[int] = None,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> bytes:
        """
        Read up to count bytes at the cursor and advance it.

        Fewer bytes are returned at end of file. count None reads to end of file.
        The read is sent at the client cursor, so it does not depend on the
        server's own position for the descriptor.
        """
        self._ensure_usable(f, 'file_read')
        if count is None:
            count = READ_TO_EOF
        if count < 0:
            raise InvalidArgumentError("count must not be negative", method='file_read', address=f.address)

        data = self._call(
            'file_pread', {'fd': str(f.fd), 'count': str(count), 'offset': str(f.offset)},
            options=options, context=context, raw=True, address=f.address,
        )
        if not isinstance(data, bytes):
            raise TransportError("expected file data, got a JSON reply", method='file_read', address=f.address)

        f.offset += len(data)
        return data

    def file_write(
        self,
        f: RemoteFile,
        data: bytes,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> int:
        """
        Write data at the cursor and advance it by the bytes written.

        With O_APPEND the server writes at end of file and the cursor is
        then set to the new file size.

        Returns:
            Bytes written, possibly fewer than len(data). Writing the rest is up to the caller.
        """
        self._ensure_usable(f, 'file_write')
        if f.flags & O_APPEND:
            reply = self._call(
                'file_write', {'fd': str(f.fd)},
                options=options, body=bytes(data), context=context, address=f.address,
            )
            written = int(reply['bytes'])
            # the write has happened; resync even if the context is cancelled meanwhile
            f.offset = self.file_size(f).size
            return written

        reply = self._call(
            'file_pwrite', {'fd': str(f.fd), 'offset': str(f.offset)},
            options=options, body=bytes(data), context=context, address=f.address,
        )
        written = int(reply['bytes'])
        f.offset += written
        return written

    def file_seek(
        self,
        f: RemoteFile,
        offset: int,
        whence: Whence = SEEK_SET,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> int:
        """
        Move the cursor; the server confirms the new offset.

        Raises:
            InvalidArgumentError: The resulting offset would be negative
        """
        self._ensure_usable(f, 'file_seek')
        whence = Whence(whence)

        if (whence == SEEK_SET and offset < 0) or (whence == SEEK_CUR and f.offset + offset < 0):
            raise InvalidArgumentError(
                f"seek to negative offset ({offset}, {whence.name})", method='file_seek', address=f.address
            )

        # the server has its own cursor, so SEEK_CUR is sent as an absolute seek
        if whence == SEEK_CUR:
            params = {'fd': str(f.fd), 'offset': str(f.offset + offset), 'whence': str(int(SEEK_SET))}
        else:
            params = {'fd': str(f.fd), 'offset': str(offset), 'whence': str(int(whence))}

        reply = self._call('file_seek', params, options=options, context=context, address=f.address)
        new_offset = int(reply['offset'])
        if new_offset < 0:
            raise InvalidArgumentError(
                f"server reported negative offset {new_offset}", method='file_seek', address=f.address
            )
        f.offset = new_offset
        return new_offset

    def file_size(
        self,
        f: RemoteFile,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> FileSizeResult:
        """Size of the open file and the server's own offset for it. The cursor does not move."""
        self._ensure_usable(f, 'file_size')
        reply = self._call('file_size', {'fd': str(f.fd)}, options=options, context=context, address=f.address)
        return FileSizeResult.model_validate(reply)

    def file_truncate(
        self,
        f: RemoteFile,
        length: int,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> None:
        """Set the file length. The cursor does not move."""
        self._ensure_usable(f, 'file_truncate')
        if length < 0:
            raise InvalidArgumentError("length must not be negative", method='file_truncate', address=f.address)
        self._call(
            'file_truncate', {'fd': str(f.fd), 'length': str(length)},
            options=options, context=context, address=f.address,
        )

    def file_pread(
        self,
        f: RemoteFile,
        count: int,
        offset: int,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> bytes:
        """Read at an absolute offset without moving the cursor."""
        self._ensure_usable(f, 'file_pread')
        if count < 0 or offset < 0:
            raise InvalidArgumentError("count and offset must not be negative", method='file_pread', address=f.address)
        data = self._call(
            'file_pread', {'fd': str(f.fd), 'count': str(count), 'offset': str(offset)},
            options=options, context=context, raw=True, address=f.address,
        )
        if not isinstance(data, bytes):
            raise TransportError("expected file data, got a JSON reply", method='file_pread', address=f.address)
        return data

    def file_pwrite(
        self,
        f: RemoteFile,
        data: bytes,
        offset: int,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> int:
        """Write at an absolute offset without moving the cursor."""
        self._ensure_usable(f, 'file_pwrite')
        if offset < 0:
            raise InvalidArgumentError("offset must not be negative", method='file_pwrite', address=f.address)
        reply = self._call(
            'file_pwrite', {'fd': str(f.fd), 'offset': str(offset)},
            options=options, body=bytes(data), context=context, address=f.address,
        )
        return int(reply['bytes'])

    def file_close(
        self,
        f: RemoteFile,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> None:
        """
        Close the descriptor on the server and locally.

        Raises:
            DescriptorClosedError: The descriptor was already closed
        """
        self._ensure_usable(f, 'file_close')
        try:
            self._call('file_close', {'fd': str(f.fd)}, options=options, context=context, address=f.address)
        except DescriptorInvalidError:
            f.closed = True
            raise
        f.closed = True
        logger.debug(f"Closed fd={f.fd} file_id={f.file_id}")
