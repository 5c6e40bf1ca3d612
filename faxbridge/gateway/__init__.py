from .auth import check_basic_auth
from .router import FaxGateway


__all__ = [
    'check_basic_auth',
    'FaxGateway'
]
