"""Authentication providers that contribute credentials to each call."""

from typing import List

from sdk.options import ClientOption, with_auth_token, with_password, with_username


class Authenticator:
    """Supplies the client options that authenticate a request."""

    def options(self) -> List[ClientOption]:
        raise NotImplementedError


class TokenAuth(Authenticator):
    """Authenticate with an auth token obtained from a previous login."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("token must not be empty")
        self.token = token

    def options(self) -> List[ClientOption]:
        return [with_auth_token(self.token)]

    def __repr__(self) -> str:
        return "TokenAuth(token=***)"


class PasswordAuth(Authenticator):
    """Send username and password in plain text with every call."""

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def options(self) -> List[ClientOption]:
        return [with_username(self.username), with_password(self.password)]

    def __repr__(self) -> str:
        return f"PasswordAuth(username={self.username!r}, password=***)"
