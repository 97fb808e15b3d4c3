"""Adobe Target decoder for mbox requests."""

import re
from typing import List
from urllib.parse import SplitResult

from .base import BaseProvider, DecodedField, ProviderType


ADOBE_TARGET_PARAMETERS = {
    "mbox": {"name": "Mbox Name", "group": "General"},
    "mboxType": {"name": "Mbox Type"},
    "mboxCount": {"name": "Mbox Count"},
    "mboxId": {"name": "Mbox ID"},
    "mboxSession": {"name": "Mbox Session"},
    "mboxPC": {"name": "Mbox PC ID"},
    "mboxPage": {"name": "Mbox Page ID"},
    "clientCode": {"name": "Client Code"},
    "mboxHost": {"name": "Page Host"},
    "mboxURL": {"name": "Page URL"},
    "mboxReferrer": {"name": "Page Referrer"},
    "screenHeight": {"name": "Screen Height"},
    "screenWidth": {"name": "Screen Width"},
    "browserWidth": {"name": "Browser Width"},
    "browserHeight": {"name": "Browser Height"},
    "browserTimeOffset": {"name": "Browser Timezone Offset"},
    "colorDepth": {"name": "Browser Color Depth"},
    "mboxXDomain": {"name": "CrossDomain Enabled"},
    "mboxTime": {"name": "Timestamp"},
    "mboxVersion": {"name": "Library Version"},
}

# /<client code>/mbox/<mbox type>
MBOX_PATH_PATTERN = re.compile(r"/([^/]+)/mbox/([^/?]+)")


class AdobeTargetProvider(BaseProvider):
    """Decoder for Adobe Target mbox requests."""

    def __init__(self):
        super().__init__(
            "ADOBETARGET",
            "Adobe Target",
            ProviderType.TESTING,
            r"\.tt\.omtrdc\.net/",
            ADOBE_TARGET_PARAMETERS
        )

    def decode_custom(self, url_parts: SplitResult) -> List[DecodedField]:
        """Extract the client code and mbox type from the request path."""
        match = MBOX_PATH_PATTERN.search(url_parts.path)
        if not match:
            return []

        return [
            DecodedField(key="clientCode", field="Client Code", value=match.group(1), group="General"),
            DecodedField(key="mboxType", field="Mbox Type", value=match.group(2), group="General"),
        ]
