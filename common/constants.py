"""Project-wide constants (API host, open flags, expiry bounds, error codes)."""

DEFAULT_API_HOST: str = "api.pcloud.com"
DEFAULT_TIMEOUT_SECONDS: int = 30

# file_read count meaning "to end of file"
READ_TO_EOF: int = 2**63 - 1

# authexpire / authinactiveexpire bounds, in seconds
AUTH_EXPIRE_DEFAULT_SECONDS: int = 31536000
AUTH_EXPIRE_MAX_SECONDS: int = 63072000
AUTH_INACTIVE_EXPIRE_DEFAULT_SECONDS: int = 2678400
AUTH_INACTIVE_EXPIRE_MAX_SECONDS: int = 5356800

# Remote result codes
RESULT_OK: int = 0
ERR_LOGIN_REQUIRED: int = 1000
ERR_INVALID_FD: int = 1007
ERR_LOGIN_FAILED: int = 2000
ERR_PARENT_NOT_FOUND: int = 2002
ERR_ALREADY_EXISTS: int = 2004
ERR_FOLDER_NOT_FOUND: int = 2005
ERR_FILE_NOT_FOUND: int = 2009
ERR_INVALID_TOKEN: int = 2012
ERR_EXPIRED_TOKEN: int = 2094
