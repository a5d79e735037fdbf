# app/models/message.py

from datetime import timezone
from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text, func
from app.models.base import Base

CODE_LENGTH = 7
MAX_MESSAGE_LENGTH = 10_000


def as_utc(value):
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Message(Base):
    __tablename__ = "messages"

    # BIGINT has no rowid alias on SQLite, so fall back to INTEGER there
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    topic = Column(Text, nullable=False)
    author = Column(Text, nullable=False)

    # Public handle for the message; the unique constraint is what actually
    # protects against two concurrent senders drawing the same code
    code = Column(String(CODE_LENGTH), nullable=False, unique=True, index=True)

    message = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def to_public_dict(self) -> dict:
        """Shape returned by /receive."""
        return {
            "id": self.id,
            "topic": self.topic,
            "author": self.author,
            "message": self.message,
            "createdAt": as_utc(self.created_at).isoformat(),
            "expiresAt": as_utc(self.expires_at).isoformat(),
        }

    def to_admin_dict(self) -> dict:
        data = self.to_public_dict()
        data["code"] = self.code
        return data
