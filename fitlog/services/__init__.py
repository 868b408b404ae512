"""Service layer: OAuth 1.0a signing, Garmin client, connect flow and import."""

from .activity_import import ImportResult, import_activities, trailing_window
from .custody import SecretCustody
from .garmin import GarminClient, map_activity_type
from .garmin_connect import begin_connect, complete_connect, disconnect
from .oauth1 import OAuth1Signer, percent_encode

__all__ = [
    "GarminClient",
    "ImportResult",
    "OAuth1Signer",
    "SecretCustody",
    "begin_connect",
    "complete_connect",
    "disconnect",
    "import_activities",
    "map_activity_type",
    "percent_encode",
    "trailing_window",
]
