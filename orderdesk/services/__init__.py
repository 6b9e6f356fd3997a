"""
                        Services Module

Business logic that sits between the HTTP layer and the repositories.

Services:
    - normalizer: raw order submission -> validated order payload
    - users: customer directory upsert keyed by phone number
"""

from orderdesk.services.normalizer import normalize_order
from orderdesk.services.users import upsert_user

__all__ = ["normalize_order", "upsert_user"]
