# app/core/message.py

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    CollisionExhaustedError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from app.models.message import CODE_LENGTH, MAX_MESSAGE_LENGTH, Message

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
MESSAGE_TTL = timedelta(days=7)
MAX_CODE_ATTEMPTS = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_code(length: int = CODE_LENGTH) -> str:
    """Random base62 code, ~3.5e12 possible values at length 7"""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_send_input(topic, author, message):
    if _is_blank(topic) or _is_blank(author) or _is_blank(message):
        raise ValidationError("Missing topic/author/message")
    # Limit is in characters (code points); an emoji counts once
    if len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError("Message too long (max 10k chars)")


def _code_exists(db: Session, code: str) -> bool:
    try:
        return db.query(Message.id).filter(Message.code == code).first() is not None
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Store error while checking code availability")
        raise StoreError("DB error checking code")


def issue_message(
    db: Session,
    topic: str,
    author: str,
    message: str,
    now: datetime = None,
    code_factory=generate_code,
) -> Message:
    """
    Persist a new message under a freshly drawn, unused code.

    The SELECT before the INSERT only saves wasted writes. The unique
    constraint on messages.code is authoritative: an IntegrityError caused by
    a concurrent insert of the same code is retried like any other collision.
    Raises CollisionExhaustedError when every attempt collides.
    """
    validate_send_input(topic, author, message)

    created_at = now or utcnow()
    expires_at = created_at + MESSAGE_TTL

    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        code = code_factory()

        if _code_exists(db, code):
            logger.warning("Code collision on attempt %d/%d", attempt, MAX_CODE_ATTEMPTS)
            continue

        record = Message(
            topic=topic,
            author=author,
            code=code,
            message=message,
            created_at=created_at,
            expires_at=expires_at,
        )
        try:
            db.add(record)
            db.commit()
        except IntegrityError:
            db.rollback()
            if _code_exists(db, code):
                logger.warning(
                    "Code taken by a concurrent insert on attempt %d/%d",
                    attempt,
                    MAX_CODE_ATTEMPTS,
                )
                continue
            logger.exception("Insert rejected by the store")
            raise StoreError("Failed to save message")
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Store error while saving message")
            raise StoreError("Failed to save message")

        logger.info("Stored message id=%s expires_at=%s", record.id, expires_at.isoformat())
        return record

    logger.error("No free code after %d attempts", MAX_CODE_ATTEMPTS)
    raise CollisionExhaustedError()


def lookup_message(db: Session, code: str, now: datetime = None) -> Message:
    """
    Return the live message for code.
    Expired and unknown codes both raise the same NotFoundError.
    """
    if _is_blank(code):
        raise ValidationError("Missing code")

    now = now or utcnow()
    try:
        record = (
            db.query(Message)
            .filter(Message.code == code, Message.expires_at > now)
            .first()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Store error while looking up code")
        raise StoreError("Server error")

    if record is None:
        raise NotFoundError()
    return record


def list_messages(db: Session):
    """All rows, newest first (admin view)"""
    try:
        return (
            db.query(Message)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Store error while listing messages")
        raise StoreError("DB error")


def delete_message(db: Session, message_id: int) -> bool:
    try:
        deleted = db.query(Message).filter(Message.id == message_id).delete()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Store error while deleting message id=%s", message_id)
        raise StoreError("DB error")

    if deleted:
        logger.info("Admin deleted message id=%s", message_id)
    return bool(deleted)


def purge_expired(db: Session, now: datetime = None) -> int:
    """Delete rows past expiry. Run by an external scheduler, never by the web process."""
    now = now or utcnow()
    try:
        deleted = (
            db.query(Message)
            .filter(Message.expires_at < now)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Store error while purging expired messages")
        raise StoreError("DB error")
    return deleted
