"""Rate limiter singleton; import from here to avoid circular deps.

Keyed on client address; only the login route carries a limit today.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, headers_enabled=False)
