"""Shared pytest fixtures for all tests."""

import itertools
from datetime import datetime, timezone
from email.utils import format_datetime

import httpx
import pytest

from sdk.auth import TokenAuth
from sdk.client import Client
from sdk.transport import Transport

TEST_TOKEN = 'tok_test123'
TEST_USERNAME = 'user@example.com'
TEST_PASSWORD = 'secret-password'

O_CREAT = 0x0040
O_EXCL = 0x0080
O_TRUNC = 0x0200
O_APPEND = 0x0400


class FakePCloud:
    """
    In-memory stand-in for the storage API, served through httpx.MockTransport.

    Folder 0 is the root "/". Every request is recorded in `calls` as
    (method, params) for assertions.
    """

    token = TEST_TOKEN
    username = TEST_USERNAME
    password = TEST_PASSWORD

    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.folders = {0: {'name': '', 'parent': None, 'created': self.now}}
        self.files = {}
        self.fds = {}
        self.calls = []
        self.max_write = None
        self.on_request = None
        self._ids = itertools.count(1000)
        self._fds = itertools.count(1)

    # helpers

    def folder_path(self, folder_id):
        if folder_id == 0:
            return '/'
        parts = []
        while folder_id:
            folder = self.folders[folder_id]
            parts.append(folder['name'])
            folder_id = folder['parent']
        return '/' + '/'.join(reversed(parts))

    def file_path(self, file_id):
        record = self.files[file_id]
        return self.folder_path(record['folder']).rstrip('/') + '/' + record['name']

    def find_folder(self, path):
        path = path.rstrip('/') or '/'
        for folder_id in self.folders:
            if self.folder_path(folder_id) == path:
                return folder_id
        return None

    def find_file(self, folder_id, name):
        for file_id, record in self.files.items():
            if record['folder'] == folder_id and record['name'] == name:
                return file_id
        return None

    def split(self, path):
        parent, _, name = path.rpartition('/')
        return self.find_folder(parent or '/'), name

    def add_folder(self, parent, name):
        folder_id = next(self._ids)
        self.folders[folder_id] = {'name': name, 'parent': parent, 'created': self.now}
        return folder_id

    def add_file(self, folder_id, name, data=b''):
        file_id = next(self._ids)
        self.files[file_id] = {
            'name': name, 'folder': folder_id, 'data': bytearray(data),
            'created': self.now, 'modified': self.now,
        }
        return file_id

    def file_metadata(self, file_id, **extra):
        record = self.files[file_id]
        metadata = {
            'name': record['name'],
            'path': self.file_path(file_id),
            'created': format_datetime(record['created']),
            'modified': format_datetime(record['modified']),
            'isfolder': False,
            'fileid': file_id,
            'parentfolderid': record['folder'],
            'size': len(record['data']),
            'contenttype': 'text/plain',
            'hash': 1234567890,
            'id': f'f{file_id}',
            'icon': 'document',
        }
        metadata.update(extra)
        return metadata

    def folder_metadata(self, folder_id, **extra):
        folder = self.folders[folder_id]
        metadata = {
            'name': folder['name'],
            'path': self.folder_path(folder_id),
            'created': format_datetime(folder['created']),
            'modified': format_datetime(folder['created']),
            'isfolder': True,
            'folderid': folder_id,
            'parentfolderid': folder['parent'],
            'id': f'd{folder_id}',
        }
        metadata.update(extra)
        return metadata

    def descendants(self, folder_id):
        children = [f for f, folder in self.folders.items() if folder['parent'] == folder_id]
        result = list(children)
        for child in children:
            result.extend(self.descendants(child))
        return result

    # request handling

    def handle(self, request):
        method = request.url.path.lstrip('/')
        params = dict(request.url.params)
        self.calls.append((method, params))
        if self.on_request is not None:
            self.on_request(method, params)

        if method != 'userinfo' and params.get('auth') != TEST_TOKEN:
            return self.error(1000, 'Log in required.')

        handler = getattr(self, 'm_' + method, None)
        if handler is None:
            return httpx.Response(404)
        return handler(params, request.content)

    @staticmethod
    def ok(**payload):
        return httpx.Response(200, json={'result': 0, **payload})

    @staticmethod
    def error(code, message):
        return httpx.Response(200, json={'result': code, 'error': message})

    def resolve_file(self, params):
        if 'fileid' in params:
            file_id = int(params['fileid'])
            return file_id if file_id in self.files else None
        folder_id, name = self.split(params['path'])
        return self.find_file(folder_id, name) if folder_id is not None else None

    def resolve_folder(self, params):
        if 'folderid' in params:
            folder_id = int(params['folderid'])
            return folder_id if folder_id in self.folders else None
        return self.find_folder(params['path'])

    def m_userinfo(self, params, body):
        if 'username' in params:
            if params.get('username') != TEST_USERNAME or params.get('password') != TEST_PASSWORD:
                return self.error(2000, 'Log in failed.')
        elif params.get('auth') != TEST_TOKEN:
            return self.error(1000, 'Log in required.')
        payload = {'userid': 42, 'email': TEST_USERNAME, 'emailverified': True, 'premium': False}
        if params.get('getauth') == '1':
            payload['auth'] = TEST_TOKEN
        return self.ok(**payload)

    def m_logout(self, params, body):
        return self.ok(auth_deleted=True)

    def _create_folder(self, params, if_not_exists=False):
        if 'path' in params:
            parent, name = self.split(params['path'])
        else:
            parent, name = int(params['folderid']), params['name']
            if parent not in self.folders:
                parent = None
        if parent is None:
            return self.error(2002, 'A component of parent directory does not exist.')
        existing = next(
            (f for f, folder in self.folders.items() if folder['parent'] == parent and folder['name'] == name),
            None,
        )
        if existing is not None:
            if if_not_exists:
                return self.ok(created=False, metadata=self.folder_metadata(existing))
            return self.error(2004, 'File or folder alredy exists.')
        folder_id = self.add_folder(parent, name)
        return self.ok(created=True, metadata=self.folder_metadata(folder_id))

    def m_createfolder(self, params, body):
        return self._create_folder(params)

    def m_createfolderifnotexists(self, params, body):
        return self._create_folder(params, if_not_exists=True)

    def m_deletefolder(self, params, body):
        folder_id = self.resolve_folder(params)
        if folder_id is None:
            return self.error(2005, 'Directory does not exist.')
        if self.descendants(folder_id) or any(r['folder'] == folder_id for r in self.files.values()):
            return self.error(2006, 'Folder is not empty.')
        metadata = self.folder_metadata(folder_id, isdeleted=True)
        del self.folders[folder_id]
        return self.ok(metadata=metadata)

    def m_deletefolderrecursive(self, params, body):
        folder_id = self.resolve_folder(params)
        if folder_id is None:
            return self.error(2005, 'Directory does not exist.')
        folders = [folder_id] + self.descendants(folder_id)
        files = [f for f, r in self.files.items() if r['folder'] in folders]
        for file_id in files:
            del self.files[file_id]
        for f in folders:
            del self.folders[f]
        return self.ok(deletedfiles=len(files), deletedfolders=len(folders))

    def m_file_open(self, params, body):
        flags = int(params.get('flags', '0'))
        if 'fileid' in params:
            file_id = int(params['fileid'])
            if file_id not in self.files:
                return self.error(2009, 'File not found.')
            folder_id, name = self.files[file_id]['folder'], self.files[file_id]['name']
        else:
            if 'path' in params:
                folder_id, name = self.split(params['path'])
            else:
                folder_id, name = int(params['folderid']), params['name']
                if folder_id not in self.folders:
                    folder_id = None
            if folder_id is None:
                return self.error(2002, 'A component of parent directory does not exist.')
            file_id = self.find_file(folder_id, name)

        if file_id is not None and flags & O_CREAT and flags & O_EXCL:
            return self.error(2004, 'File or folder alredy exists.')
        if file_id is None:
            if not flags & O_CREAT:
                return self.error(2009, 'File not found.')
            file_id = self.add_file(folder_id, name)
        if flags & O_TRUNC:
            self.files[file_id]['data'] = bytearray()

        fd = next(self._fds)
        self.fds[fd] = {'file_id': file_id, 'offset': 0, 'flags': flags}
        return self.ok(fd=fd, fileid=file_id)

    def _fd(self, params):
        return self.fds.get(int(params['fd']))

    def m_file_write(self, params, body):
        handle = self._fd(params)
        if handle is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        data = self.files[handle['file_id']]['data']
        if handle['flags'] & O_APPEND:
            handle['offset'] = len(data)
        chunk = body if self.max_write is None else body[:self.max_write]
        start = handle['offset']
        if start > len(data):
            data.extend(b'\0' * (start - len(data)))
        data[start:start + len(chunk)] = chunk
        handle['offset'] = start + len(chunk)
        return self.ok(bytes=len(chunk))

    def m_file_pwrite(self, params, body):
        handle = self._fd(params)
        if handle is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        data = self.files[handle['file_id']]['data']
        start = int(params['offset'])
        if start > len(data):
            data.extend(b'\0' * (start - len(data)))
        chunk = body if self.max_write is None else body[:self.max_write]
        data[start:start + len(chunk)] = chunk
        return self.ok(bytes=len(chunk))

    def m_file_read(self, params, body):
        handle = self._fd(params)
        if handle is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        data = self.files[handle['file_id']]['data']
        start = handle['offset']
        chunk = bytes(data[start:start + int(params['count'])])
        handle['offset'] = start + len(chunk)
        return httpx.Response(200, content=chunk, headers={'content-type': 'application/octet-stream'})

    def m_file_pread(self, params, body):
        handle = self._fd(params)
        if handle is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        data = self.files[handle['file_id']]['data']
        start = int(params['offset'])
        chunk = bytes(data[start:start + int(params['count'])])
        return httpx.Response(200, content=chunk, headers={'content-type': 'application/octet-stream'})

    def m_file_seek(self, params, body):
        handle = self._fd(params)
        if handle is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        size = len(self.files[handle['file_id']]['data'])
        base = {0: 0, 1: handle['offset'], 2: size}[int(params.get('whence', '0'))]
        offset = base + int(params['offset'])
        if offset < 0:
            return self.error(1005, 'Invalid offset.')
        handle['offset'] = offset
        return self.ok(offset=offset)

    def m_file_size(self, params, body):
        handle = self._fd(params)
        if handle is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        return self.ok(size=len(self.files[handle['file_id']]['data']), offset=handle['offset'])

    def m_file_truncate(self, params, body):
        handle = self._fd(params)
        if handle is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        data = self.files[handle['file_id']]['data']
        length = int(params['length'])
        if length < len(data):
            del data[length:]
        else:
            data.extend(b'\0' * (length - len(data)))
        return self.ok()

    def m_file_close(self, params, body):
        if self.fds.pop(int(params['fd']), None) is None:
            return self.error(1007, 'Invalid or closed file descriptor.')
        return self.ok()

    def _destination(self, params, source_id):
        """Resolve a destination to (folder_id, name); folder_id None if missing."""
        source = self.files[source_id]
        if 'topath' in params:
            topath = params['topath']
            if topath.endswith('/'):
                return self.find_folder(topath), source['name']
            return self.split(topath)
        if 'tofolderid' in params:
            folder_id = int(params['tofolderid'])
            if folder_id not in self.folders:
                folder_id = None
            return folder_id, params.get('toname', source['name'])
        return source['folder'], params['toname']

    def m_copyfile(self, params, body):
        source_id = self.resolve_file(params)
        if source_id is None:
            return self.error(2009, 'File not found.')
        folder_id, name = self._destination(params, source_id)
        if folder_id is None:
            return self.error(2005, 'Directory does not exist.')
        existing = self.find_file(folder_id, name)
        extra = {}
        if existing is not None:
            if params.get('noover') == '1':
                return self.error(2004, 'File or folder alredy exists.')
            del self.files[existing]
            extra['deletedfileid'] = existing
        copy_id = self.add_file(folder_id, name, bytes(self.files[source_id]['data']))
        if 'mtime' in params:
            self.files[copy_id]['modified'] = datetime.fromtimestamp(int(params['mtime']), tz=timezone.utc)
        if 'ctime' in params:
            self.files[copy_id]['created'] = datetime.fromtimestamp(int(params['ctime']), tz=timezone.utc)
        return self.ok(metadata=self.file_metadata(copy_id, **extra))

    def m_renamefile(self, params, body):
        source_id = self.resolve_file(params)
        if source_id is None:
            return self.error(2009, 'File not found.')
        folder_id, name = self._destination(params, source_id)
        if folder_id is None:
            return self.error(2005, 'Directory does not exist.')
        existing = self.find_file(folder_id, name)
        extra = {}
        if existing is not None and existing != source_id:
            del self.files[existing]
            extra['deletedfileid'] = existing
        self.files[source_id]['folder'] = folder_id
        self.files[source_id]['name'] = name
        return self.ok(metadata=self.file_metadata(source_id, **extra))

    def m_deletefile(self, params, body):
        file_id = self.resolve_file(params)
        if file_id is None:
            return self.error(2009, 'File not found.')
        metadata = self.file_metadata(file_id, isdeleted=True)
        del self.files[file_id]
        return self.ok(metadata=metadata)

    def params_of(self, method):
        """Parameters of the most recent call to method."""
        for name, params in reversed(self.calls):
            if name == method:
                return params
        raise AssertionError(f"{method} was not called")


@pytest.fixture
def fake_server():
    """Empty in-memory storage API with a /f folder."""
    server = FakePCloud()
    server.add_folder(0, 'f')
    return server


@pytest.fixture
def http_client(fake_server):
    """httpx client routed to the fake server."""
    return httpx.Client(transport=httpx.MockTransport(fake_server.handle), base_url='http://test')


@pytest.fixture
def transport(http_client):
    return Transport('http://test', timeout=5, client=http_client)


@pytest.fixture
def client(transport):
    """Client authenticated with the fake server's token."""
    return Client(transport, TokenAuth(TEST_TOKEN))


@pytest.fixture
def temp_config_path(tmp_path):
    """
    Path of a config file inside a temporary .pcloud directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to config.json (not created)
    """
    return tmp_path / '.pcloud' / 'config.json'
