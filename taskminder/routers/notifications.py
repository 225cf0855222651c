from fastapi import APIRouter, Depends, HTTPException, status, Query, Header
from sqlalchemy.orm import Session
from typing import List, Optional

from taskminder.core.database import get_db
from taskminder.core.security import decode_token
from taskminder.models.user import User
from taskminder.schemas.notification import (
    NotificationResponse,
    UnreadCountResponse,
    MarkAllReadResponse,
    CheckResponse
)
from taskminder.services.notification_service import NotificationStore
from taskminder.services.notification_checker import resolve_utc_offset
from taskminder.services.scheduler import check_user_notifications, CheckAlreadyRunning

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_current_user(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(None)
) -> User:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    token = authorization.replace("Bearer ", "")
    user_id = decode_token(token)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return user


def get_owned_notification(store: NotificationStore, user: User, notification_id: int):
    notification = store.get_for_user(user.id, notification_id)
    if not notification:
        # même réponse si la notification appartient à un autre utilisateur
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return NotificationStore(db).list_for_user(current_user.id, limit=limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"unread": NotificationStore(db).count_unread(current_user.id)}


@router.patch("/read-all", response_model=MarkAllReadResponse)
def mark_all_as_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"updated": NotificationStore(db).mark_all_read(current_user.id)}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    store = NotificationStore(db)
    notification = get_owned_notification(store, current_user, notification_id)
    return store.mark_read(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    store = NotificationStore(db)
    notification = get_owned_notification(store, current_user, notification_id)
    store.delete(notification)


@router.post("/check", response_model=CheckResponse)
def check_now(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Lance tout de suite la vérification pour l'utilisateur courant"""
    try:
        created = check_user_notifications(
            db,
            current_user.id,
            utc_offset=resolve_utc_offset(current_user.utc_offset_minutes)
        )
    except CheckAlreadyRunning:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Check already running")

    return {"created": created}
