"""Request rate limiting for the EDI API.

Keyed by client address. Only endpoints that do heavy work (file
uploads) are decorated.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
