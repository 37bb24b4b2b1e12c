from slowapi import Limiter
from slowapi.util import get_remote_address

from MARKET.core.config import RATE_LIMIT_DEFAULT

# Shared limiter; routes decorated with limiter.limit must accept `request: Request`.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
)
