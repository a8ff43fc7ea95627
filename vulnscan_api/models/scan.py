# vulnscan_api/models/scan.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from vulnscan_api.db.base import Base
import datetime
import uuid

# Acunetix session states
STATUS_SCHEDULED = "scheduled"
STATUS_COMPLETED = "completed"
ACTIVE_STATUSES = ("scheduled", "queued", "starting", "processing", "running")
TERMINAL_STATUSES = ("completed", "failed", "aborted")


class Scan(Base):
    __tablename__ = "scans"
    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    acunetix_scan_id = Column(String, nullable=False, index=True)
    acunetix_target_id = Column(String, nullable=True)
    target_url = Column(String, nullable=False)
    scan_type = Column(String, default="full")
    profile_id = Column(String, nullable=True)
    status = Column(String, default=STATUS_SCHEDULED, index=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    threat_level = Column(String, nullable=True)
    high_vulnerabilities = Column(Integer, default=0)
    medium_vulnerabilities = Column(Integer, default=0)
    low_vulnerabilities = Column(Integer, default=0)
    info_vulnerabilities = Column(Integer, default=0)
    report_id = Column(String, nullable=True, index=True)
    report_url = Column(String, nullable=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", back_populates="scans")
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)
