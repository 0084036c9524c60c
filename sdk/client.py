"""Client for the remote storage API."""

from datetime import timedelta
from typing import Any, Dict, Optional, Sequence, Union

from common.logging_config import get_logger
from sdk.auth import Authenticator, TokenAuth
from sdk.config import Config
from sdk.context import CallContext
from sdk.descriptors import DescriptorMixin
from sdk.fileops import FileOpsMixin
from sdk.models import UserInfo
from sdk.options import (
    ClientOption,
    compose,
    with_auth_expire,
    with_auth_inactive_expire,
    with_get_auth,
    with_password,
    with_username,
)
from sdk.transport import Transport

logger = get_logger(__name__)


class Client(DescriptorMixin, FileOpsMixin):
    """
    Client for the storage API.

    Every call's parameters are built in this order: the operation's own
    parameters, the client-wide options, the authenticator's options, then
    the options passed to the call. A key set twice keeps the last value.
    """

    def __init__(
        self,
        transport: Transport,
        authenticator: Optional[Authenticator] = None,
        options: Sequence[ClientOption] = (),
    ):
        """
        Args:
            transport: Transport used for every call
            authenticator: Supplies credentials; None for unauthenticated calls
            options: Client options applied to every call
        """
        self.transport = transport
        self.authenticator = authenticator
        self.options = list(options)

    @classmethod
    def from_config(cls, config: Config, options: Sequence[ClientOption] = ()) -> 'Client':
        """Build a client from configuration, authenticated if a token is configured."""
        transport = Transport(config.get_base_url(), timeout=config.get_timeout())
        token = config.get_auth_token()
        return cls(transport, TokenAuth(token) if token else None, options)

    def _call(
        self,
        method: str,
        params: Optional[Dict[str, str]] = None,
        options: Sequence[ClientOption] = (),
        body: Optional[bytes] = None,
        context: Optional[CallContext] = None,
        raw: bool = False,
        address: Any = None,
        authenticated: bool = True,
    ) -> Union[Dict[str, Any], bytes]:
        chain = list(self.options)
        if authenticated and self.authenticator is not None:
            chain.extend(self.authenticator.options())
        chain.extend(options)
        return self.transport.call(
            method, compose(params, chain), body=body, context=context, raw=raw, address=address
        )

    def login(
        self,
        username: str,
        password: str,
        auth_expire: Optional[Union[timedelta, int]] = None,
        auth_inactive_expire: Optional[Union[timedelta, int]] = None,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> UserInfo:
        """
        Log in with username and password and switch to token authentication.

        Args:
            username: Account email
            password: Account password
            auth_expire: Token lifetime, clamped to the API's bounds
            auth_inactive_expire: Token inactivity lifetime, clamped to the API's bounds

        Returns:
            UserInfo, including the new auth token

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        chain = [with_get_auth(), with_username(username), with_password(password)]
        if auth_expire is not None:
            chain.append(with_auth_expire(auth_expire))
        if auth_inactive_expire is not None:
            chain.append(with_auth_inactive_expire(auth_inactive_expire))
        chain.extend(options)

        logger.info(f"Logging in as {username}")
        reply = self._call('userinfo', options=chain, context=context, authenticated=False)
        info = UserInfo.model_validate(reply)
        if info.auth:
            self.authenticator = TokenAuth(info.auth)
        else:
            logger.warning("Login succeeded but no auth token was returned")
        return info

    def userinfo(
        self,
        options: Sequence[ClientOption] = (),
        context: Optional[CallContext] = None,
    ) -> UserInfo:
        reply = self._call('userinfo', options=options, context=context)
        return UserInfo.model_validate(reply)

    def logout(self, context: Optional[CallContext] = None) -> bool:
        """
        Invalidate the current auth token.

        Returns:
            True if the server deleted the token
        """
        reply = self._call('logout', context=context)
        self.authenticator = None
        return bool(reply.get('auth_deleted', False))

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> 'Client':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
