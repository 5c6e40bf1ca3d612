from typing import Optional

from pydantic.v1 import BaseSettings, Extra

from .enums import DEFAULT_FAX_PROVIDER


class Config(BaseSettings):
    # Kept as a plain string so unknown names reach the resolver instead of
    # failing settings validation.
    FAX_PROVIDER: str = str(DEFAULT_FAX_PROVIDER)
    FAX_FROM: Optional[str] = None

    BASIC_AUTH_USER: Optional[str] = None
    BASIC_AUTH_PASS: Optional[str] = None

    class Config:
        extra = Extra.ignore
        env_file = '.env'
        env_file_encoding = 'utf-8'

    def first_missing(self, *fields: str) -> Optional[str]:
        """Returns the first of ``fields`` that is unset or empty."""
        for field in fields:
            if not getattr(self, field, None):
                return field
        return None

    @property
    def basic_auth_enabled(self) -> bool:
        return bool(self.BASIC_AUTH_USER and self.BASIC_AUTH_PASS)


class TelnyxConfig(Config):
    TELNYX_API_KEY: Optional[str] = None
    CONNECTION_ID: Optional[str] = None


class SinchConfig(Config):
    SINCH_PROJECT_ID: Optional[str] = None
    SINCH_ACCESS_KEY: Optional[str] = None
    SINCH_SECRET_KEY: Optional[str] = None


class DropboxFaxConfig(Config):
    DROPBOX_SIGN_API_KEY: Optional[str] = None
    DROPBOX_FAX_TEST_MODE: Optional[str] = None

    @property
    def dropbox_test_mode(self) -> bool:
        return self.DROPBOX_FAX_TEST_MODE != '0'


config_classes = [
    TelnyxConfig,
    SinchConfig,
    DropboxFaxConfig
]


class FaxConfig(*config_classes):
    pass
