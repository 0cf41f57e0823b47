from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base


Base = declarative_base()


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


class UserDocument(Base):
    __tablename__ = "user_documents"

    id = Column(String(128), primary_key=True)
    data_json = Column(Text, default="{}", nullable=False)
    revision = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    def data(self) -> Dict[str, Any]:
        return _safe_json_loads(self.data_json)


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    uid = Column(String(36), primary_key=True)
    token = Column(String(64), nullable=False, unique=True, index=True)
    revoked = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=_now, nullable=False)
    last_seen_at = Column(DateTime, default=_now, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "token": self.token,
            "revoked": bool(self.revoked),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_seen_at": self.last_seen_at.isoformat() if self.last_seen_at else None,
        }


def _safe_json_loads(raw: str) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}
