# app/api/messages.py

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.circuit_breaker import RECEIVE_LIMIT, limiter
from app.core.message import issue_message, lookup_message
from app.infra.postgres import get_db
from app.models.message import as_utc

router = APIRouter()


class SendMessageSchema(BaseModel):
    topic: Optional[str] = None
    author: Optional[str] = None
    message: Optional[str] = None


class ReceiveMessageSchema(BaseModel):
    code: Optional[str] = None


@router.post("/send")
def send_message(payload: Optional[SendMessageSchema] = None, db: Session = Depends(get_db)):
    payload = payload or SendMessageSchema()
    record = issue_message(db, payload.topic, payload.author, payload.message)
    return {
        "id": record.id,
        "code": record.code,
        "expiresAt": as_utc(record.expires_at).isoformat(),
    }


@router.post("/receive")
@limiter.limit(RECEIVE_LIMIT)
def receive_message(
    request: Request,
    payload: Optional[ReceiveMessageSchema] = None,
    db: Session = Depends(get_db),
):
    # Reading never consumes the message; it stays until expiry or admin delete
    code = payload.code if payload else None
    return lookup_message(db, code).to_public_dict()
