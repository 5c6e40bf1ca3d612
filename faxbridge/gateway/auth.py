import base64
import binascii
import hmac
from typing import Optional

from faxbridge.faxing.config import Config


def check_basic_auth(authorization: Optional[str], config: Config) -> bool:
    """
    Checks a Basic ``authorization`` header value against ``BASIC_AUTH_USER``
    and ``BASIC_AUTH_PASS``. Every request passes when either is unset.
    """
    if not config.basic_auth_enabled:
        return True

    header = authorization or ''
    if not header.startswith('Basic '):
        return False

    try:
        credentials = base64.b64decode(header[len('Basic '):], validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError):
        return False

    user, _, password = credentials.partition(':')
    return (hmac.compare_digest(user.encode(), config.BASIC_AUTH_USER.encode())
            and hmac.compare_digest(password.encode(), config.BASIC_AUTH_PASS.encode()))
