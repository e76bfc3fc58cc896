import json
import logging

audit_logger = logging.getLogger("mobilespo.audit")
logger = logging.getLogger(__name__)


def record(event: str, category: str, level: int = logging.INFO, **metadata):
    """
    Write one audit entry. Best-effort: a failing sink is logged, never raised.
    """
    try:
        audit_logger.log(
            level,
            "%s | category=%s | %s",
            event,
            category,
            json.dumps(metadata, default=str, sort_keys=True),
        )
    except Exception:
        logger.warning("Audit record failed for event %r", event, exc_info=True)
