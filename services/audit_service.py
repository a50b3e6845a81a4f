import logging

from flask import has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import AuditLog

logger = logging.getLogger(__name__)


def record_audit(user_id, action, entity_type, entity_id=None, details=None):
    """
    Append an audit entry in its own commit.

    Called after the primary mutation has been committed. A failure here is
    logged and never rolls back or blocks the mutation it describes.
    """
    ip_address = request.remote_addr if has_request_context() else None
    try:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=ip_address
        )
        db.session.add(entry)
        db.session.commit()
        return entry
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(
            "Audit write failed: action=%s entity=%s/%s user=%s",
            action, entity_type, entity_id, user_id
        )
        return None
