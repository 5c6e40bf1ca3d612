from .client import FaxGatewayClient, FaxGatewayError


__all__ = [
    'FaxGatewayClient',
    'FaxGatewayError'
]
