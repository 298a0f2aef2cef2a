"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, String, Integer, Float, DateTime, Text, Index
from backend.database import Base

class ProviderConfigRow(Base):
    __tablename__ = "ai_providers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    provider = Column(String, unique=True, nullable=False, index=True)
    display_name = Column(String, nullable=False, default="")
    default_model = Column(String, nullable=False)
    base_url = Column(String, nullable=True)
    encrypted_credential = Column(Text, nullable=True)
    priority = Column(Integer, nullable=False, default=100)
    capabilities_json = Column(Text, nullable=False, default='["chat"]')
    status = Column(String, nullable=False, default="active")
    is_healthy = Column(Boolean, nullable=False, default=True)
    consecutive_failures = Column(Integer, nullable=False, default=0)
    total_failures = Column(Integer, nullable=False, default=0)
    last_failure_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class UsageLogRow(Base):
    __tablename__ = "ai_usage_logs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    provider = Column(String, nullable=False)
    model = Column(String, nullable=False, default="")
    input_tokens = Column(Integer, nullable=False, default=0)
    output_tokens = Column(Integer, nullable=False, default=0)
    total_tokens = Column(Integer, nullable=False, default=0)
    estimated_cost = Column(Float, nullable=False, default=0.0)
    request_type = Column(String, nullable=True)
    capability = Column(String, nullable=True)
    success = Column(Boolean, nullable=False, default=True)
    error_message = Column(Text, nullable=True)
    latency_ms = Column(Integer, nullable=False, default=0)
    user_id = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_ai_usage_logs_provider_created", "provider", "created_at"),
    )
