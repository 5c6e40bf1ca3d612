from dataclasses import dataclass
from typing import Dict, List, Optional

from .base import FaxService
from .dropbox import DropboxFaxService
from .enums import DEFAULT_FAX_PROVIDER, FaxProvider
from .sinch import SinchService
from .telnyx import TelnyxService


@dataclass
class ProviderResolution:
    ok: bool
    provider: Optional[FaxService] = None
    error: Optional[str] = None


class FaxServiceFactory:
    """
    Maps the closed set of ``FaxProvider`` names to provider singletons.

    Adding a vendor means adding a ``FaxProvider`` member and registering its
    service here; names outside the enum are never resolved.
    """

    def __init__(self):
        self._services: Dict[FaxProvider, FaxService] = {}

    def register_service(self, key: FaxProvider, service: FaxService):
        self._services[FaxProvider(key)] = service

    def providers(self) -> List[FaxProvider]:
        return list(self._services)

    def services(self) -> List[FaxService]:
        return list(self._services.values())

    def resolve(self, name: Optional[str] = None) -> ProviderResolution:
        """
        Resolves a configured provider name, case-insensitively. A missing
        name resolves to the default provider; an unknown one fails without
        falling back.
        """
        normalized = (name or '').strip().lower() or str(DEFAULT_FAX_PROVIDER)
        try:
            key = FaxProvider(normalized)
        except ValueError:
            key = None

        service = self._services.get(key) if key is not None else None
        if service is None:
            return ProviderResolution(ok=False, error=f'Unsupported fax provider: {normalized}')
        return ProviderResolution(ok=True, provider=service)

    def get(self, name: Optional[str] = None) -> FaxService:
        resolution = self.resolve(name)
        if not resolution.ok:
            raise ValueError(resolution.error)
        return resolution.provider


fax_service_factory = FaxServiceFactory()
fax_service_factory.register_service(key=FaxProvider.telnyx, service=TelnyxService())
fax_service_factory.register_service(key=FaxProvider.sinch, service=SinchService())
fax_service_factory.register_service(key=FaxProvider.dropbox_fax, service=DropboxFaxService())


def resolve_provider(name: Optional[str] = None) -> ProviderResolution:
    return fax_service_factory.resolve(name)
