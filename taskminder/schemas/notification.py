from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, Any

class NotificationResponse(BaseModel):
    id: int
    user_id: int
    related_task_id: Optional[int]
    type: str
    title: str
    message: str
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="meta")
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class UnreadCountResponse(BaseModel):
    unread: int

class MarkAllReadResponse(BaseModel):
    updated: int

class CheckResponse(BaseModel):
    """Résultat d'une vérification déclenchée à la main"""
    created: int
