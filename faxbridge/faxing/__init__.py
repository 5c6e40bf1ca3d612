from .config import Config, FaxConfig, TelnyxConfig, SinchConfig, DropboxFaxConfig
from .context import ProviderContext, RequestLogger
from .types import SendFaxParams, ProviderSendResult, DecodedBody
from .base import FaxService
from .telnyx import TelnyxService
from .sinch import SinchService
from .dropbox import DropboxFaxService
from .factory import fax_service_factory, resolve_provider, ProviderResolution
from .enums import FaxProvider


__all__ = [
    'Config',
    'FaxConfig',
    'TelnyxConfig',
    'SinchConfig',
    'DropboxFaxConfig',
    'ProviderContext',
    'RequestLogger',
    'SendFaxParams',
    'ProviderSendResult',
    'DecodedBody',
    'FaxService',
    'TelnyxService',
    'SinchService',
    'DropboxFaxService',
    'fax_service_factory',
    'resolve_provider',
    'ProviderResolution',
    'FaxProvider'
]
