# app/api/admin.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.message import delete_message, list_messages
from app.core.security import require_admin
from app.infra.postgres import get_db

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


@router.get("/messages")
def list_messages_endpoint(db: Session = Depends(get_db)):
    return [m.to_admin_dict() for m in list_messages(db)]


@router.delete("/messages/{message_id}")
def delete_message_endpoint(message_id: int, db: Session = Depends(get_db)):
    delete_message(db, message_id)
    return {"ok": True}
