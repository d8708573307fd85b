"""Anti-forgery ``state`` helpers for the authorization-code flow.

A fresh random value is stored before the user is redirected to the provider
and compared against the value echoed back on the callback. Only a short
prefix of a state value is ever logged.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from typing import Any, Final

from sceneid.log_utils import mask_sensitive

_LOG = logging.getLogger("sceneid.state")

_STATE_BYTES: Final[int] = 24

# stored once a callback has used the state; never equal to a received value
CONSUMED_STATE: Final[str] = "!consumed"


def generate_state(nbytes: int = _STATE_BYTES) -> str:
    """Return a URL-safe random state value."""
    state = secrets.token_urlsafe(nbytes)
    _LOG.debug("Generated state %s", mask_sensitive(state, 4))
    return state


def states_match(expected: Any, received: Any) -> bool:
    """Compare a stored state with the one received on the callback.

    Values are compared as strings in constant time. A missing received value
    or a consumed stored state never matches.
    """
    if expected == CONSUMED_STATE or received is None or received == "":
        return False
    return hmac.compare_digest(str(expected).encode("utf-8"), str(received).encode("utf-8"))
