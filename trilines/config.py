"""
Single place for default match/runtime configuration.
Values can be overridden with environment variables (TRILINES_*).
"""
import os


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable; unset means default."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


# "development" or "production". Controls defaults that differ between the two.
ENV = os.environ.get("TRILINES_ENV", "development").lower()

# Board used when a match is created without an explicit board ("small" or "medium").
DEFAULT_BOARD = os.environ.get("TRILINES_DEFAULT_BOARD", "small")

# Pause between AI moves so a UI can animate each line before the next is computed.
AI_MOVE_DELAY = float(os.environ.get("TRILINES_AI_MOVE_DELAY", "0.35"))

# When on, invariant violations raise InvariantViolation; when off they are logged and the
# offending mutation is skipped. On in development, off in production, unless set explicitly.
STRICT_INVARIANTS = env_flag("TRILINES_STRICT_INVARIANTS", ENV != "production")

LOG_LEVEL = os.environ.get("TRILINES_LOG_LEVEL", "INFO").upper()
