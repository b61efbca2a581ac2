from __future__ import annotations

from sqlalchemy import Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class ContentAIImprovement(Base):
  __tablename__ = "content_ai_improvements"
  __table_args__ = (
    Index("ix_content_ai_improvements_target", "content_type", "content_id", "field"),
    Index("ix_content_ai_improvements_status", "status"),
  )

  id: Mapped[str] = mapped_column(String, primary_key=True)
  content_type: Mapped[str] = mapped_column(String, nullable=False)
  content_id: Mapped[str] = mapped_column(String, nullable=False)
  field: Mapped[str] = mapped_column(String, nullable=False)
  status: Mapped[str] = mapped_column(String, nullable=False)
  progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  progress_message: Mapped[str | None] = mapped_column(Text, nullable=True)
  original_content: Mapped[str | None] = mapped_column(Text, nullable=True)
  quality_analysis: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
  improvement_result: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
  improved_content: Mapped[str | None] = mapped_column(Text, nullable=True)
  error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
  started_at: Mapped[str] = mapped_column(String, nullable=False)
  completed_at: Mapped[str | None] = mapped_column(String, nullable=True)
  created_at: Mapped[str] = mapped_column(String, nullable=False, server_default=text("""to_char((now() AT TIME ZONE 'UTC'), 'YYYY-MM-DD"T"HH24:MI:SS"Z"')"""))
