# util/functions.py
import logging
import os

logger = logging.getLogger(__name__)


def remove_quietly(path: str) -> bool:
    """
    - Best-effort delete of a local temp file.
    - Failures are logged and never raised; returns whether the file is gone.
    """
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning("tmpfile.remove.error path=%s err=%s", path, e)
        return False


def client_ip(forwarded_for: str | None, peer: str | None, trust_proxy: bool) -> str:
    if trust_proxy and forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return peer or "unknown"
