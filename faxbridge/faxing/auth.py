"""Authorization header schemes used by the fax vendors."""
import base64


def bearer_auth_header(token: str) -> str:
    return f'Bearer {token}'


def basic_auth_header(username: str, password: str = '') -> str:
    """
    Builds an HTTP Basic header. An empty ``password`` still keeps the colon,
    which is how API-key-as-username schemes expect it.
    """
    credentials = base64.b64encode(f'{username}:{password}'.encode('utf-8')).decode('ascii')
    return f'Basic {credentials}'
