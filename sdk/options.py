"""Global request parameters, expressed as composable client options.

A client option is a callable taking the outgoing parameter dict and writing
its own key(s) into it. Options are applied in the order given; the only
interaction between them is that a key written twice keeps the last value.

https://docs.pcloud.com/methods/intro/global_parameters.html
"""

import math
from datetime import timedelta
from typing import Callable, Dict, Iterable, Optional, Union

from common.constants import (
    AUTH_EXPIRE_DEFAULT_SECONDS,
    AUTH_EXPIRE_MAX_SECONDS,
    AUTH_INACTIVE_EXPIRE_DEFAULT_SECONDS,
    AUTH_INACTIVE_EXPIRE_MAX_SECONDS,
)
from sdk.exceptions import UnsupportedOptionError

Params = Dict[str, str]
ClientOption = Callable[[Params], None]
Duration = Union[timedelta, int, float]


def compose(params: Optional[Params], options: Iterable[ClientOption]) -> Params:
    """
    Apply options, in order, to a copy of params.

    Args:
        params: Base parameters of the operation (not modified)
        options: Client options to apply

    Returns:
        New parameter dict
    """
    composed = dict(params or {})
    for option in options:
        option(composed)
    return composed


def clamp_seconds(duration: Duration, default: int, maximum: int) -> int:
    """
    Clamp a duration to whole seconds within [0, maximum].

    Negative durations and NaN become the default, durations above the
    maximum (infinity included) become the maximum. Fractions of a second
    are truncated toward zero.
    """
    if isinstance(duration, timedelta):
        duration = duration.total_seconds()
    if isinstance(duration, float):
        if math.isnan(duration):
            return default
        if math.isinf(duration):
            return maximum if duration > 0 else default
    seconds = int(duration)

    if seconds < 0:
        seconds = default
    if seconds > maximum:
        seconds = maximum
    return seconds


def with_id(request_id: str) -> ClientOption:
    """
    Tag the request; the id is echoed back in the reply, successful or not.
    """
    def apply(params: Params) -> None:
        params['id'] = str(request_id)
    return apply


def with_get_auth() -> ClientOption:
    """
    Ask for an auth token to be returned on successful authentication.

    Tokens are at most 64 bytes and can be sent back as the auth parameter
    instead of username/password.
    """
    def apply(params: Params) -> None:
        params['getauth'] = '1'
    return apply


def with_username(username: str) -> ClientOption:
    """Plain text username. Only over TLS."""
    def apply(params: Params) -> None:
        params['username'] = username
    return apply


def with_password(password: str) -> ClientOption:
    """Plain text password. Only over TLS."""
    def apply(params: Params) -> None:
        params['password'] = password
    return apply


def with_auth_token(token: str) -> ClientOption:
    def apply(params: Params) -> None:
        params['auth'] = token
    return apply


def with_auth_expire(duration: Duration) -> ClientOption:
    """
    Lifetime of a requested auth token, counted from now.

    Defaults to 31536000 seconds, capped at 63072000.
    """
    seconds = clamp_seconds(duration, AUTH_EXPIRE_DEFAULT_SECONDS, AUTH_EXPIRE_MAX_SECONDS)

    def apply(params: Params) -> None:
        params['authexpire'] = str(seconds)
    return apply


def with_auth_inactive_expire(duration: Duration) -> ClientOption:
    """
    Inactivity lifetime of a requested auth token, counted from now.

    Defaults to 2678400 seconds, capped at 5356800.
    """
    seconds = clamp_seconds(
        duration, AUTH_INACTIVE_EXPIRE_DEFAULT_SECONDS, AUTH_INACTIVE_EXPIRE_MAX_SECONDS
    )

    def apply(params: Params) -> None:
        params['authinactiveexpire'] = str(seconds)
    return apply


def with_timeformat_unix_timestamp() -> ClientOption:
    """
    Never apply this option.

    Replies are decoded assuming the default RFC 2822 date format
    ("Thu, 21 Mar 2013 18:31:45 +0000"). Switching the API to Unix
    timestamps would break every model that carries a date, so applying
    this option raises instead of sending timeformat=timestamp.
    """
    def apply(params: Params) -> None:
        raise UnsupportedOptionError(
            "timeformat=timestamp is not supported: replies are decoded as RFC 2822 dates"
        )
    return apply
