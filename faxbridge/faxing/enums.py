from enum import Enum


class FaxProvider(str, Enum):
    telnyx = 'telnyx'
    sinch = 'sinch'
    dropbox_fax = 'dropbox-fax'

    def __str__(self):
        return str(self.value)


DEFAULT_FAX_PROVIDER = FaxProvider.telnyx
