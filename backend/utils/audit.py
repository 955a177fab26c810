import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.log import Log
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)

def client_ip(request):
    # Request.client is None under some ASGI transports
    return request.client.host if request is not None and request.client else None

def add_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None) -> Log:
    # Joins the caller's transaction; committed together with the audited change
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    return entry

def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    add_log(db, user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Audit write failed: %s %s", action, resource)
        raise PersistenceError() from exc
    logger.info("%s %s %s user=%s", action, resource, status, user_id)
