from sqlalchemy import Column, Integer, String, DateTime
from taskminder.core.database import Base
from taskminder.core.clock import utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)

    # Décalage heure locale pour les notifications (None = valeur de la config)
    utc_offset_minutes = Column(Integer, nullable=True)
