import hashlib
import logging
from typing import Any

# Create the library logger
logger = logging.getLogger("keypage")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_key(key: Any) -> str:
    """
    Redacts key information for logging.
    Hashes the value to allow correlation across log lines without revealing it.
    Raw bytes are hashed as-is, anything else through its str() form.
    """
    try:
        raw = key if isinstance(key, bytes) else str(key).encode("utf-8")
        return hashlib.sha256(raw).hexdigest()[:8]
    except Exception:
        return "<redaction_failed>"
