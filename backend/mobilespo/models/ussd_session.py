from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.ext.mutable import MutableDict, MutableList
from mobilespo.database.base import Base


class UssdSessionRecord(Base):
    __tablename__ = "ussd_sessions"

    id = Column(Integer, primary_key=True)
    session_id = Column(String(128), unique=True, index=True, nullable=False)
    phone_number = Column(String(20), index=True, nullable=False)
    language = Column(String(20), nullable=False, default="english")
    state = Column(String(50), nullable=False, default="main_menu")
    context = Column(MutableDict.as_mutable(JSON), default=dict)
    input_history = Column(MutableList.as_mutable(JSON), default=list)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_activity = Column(DateTime(timezone=True), nullable=False, index=True)
