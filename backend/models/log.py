from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from database import Base

# Audit trail of storefront events (REGISTER, LOGIN, LOGOUT, ORDER_CREATE, TICKET_PDF)
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Anonymous events (failed logins, registrations) carry no user
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    action = Column(String(50), index=True, nullable=False)
    resource = Column(String(50), index=True, nullable=False)
    status = Column(String(20), index=True, nullable=False, default="SUCCESS")
    ip = Column(String(64), nullable=True)

    # Event context: email, order id, totals. Never credentials.
    meta = Column(JSON, nullable=True)
