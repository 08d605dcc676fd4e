"""Presentation 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from presentation_hub.database import Base
from presentation_hub.utils.helpers import utcnow


class Presentation(Base):
    __tablename__ = "presentations"

    id = Column(String(36), primary_key=True)
    title = Column(String(300), nullable=False)
    description = Column(Text)
    author = Column(String(200), nullable=False)
    date_created = Column(DateTime, default=utcnow, nullable=False)
    date_presented = Column(String(40))
    category = Column(String(100), default="general")
    tags = Column(Text)  # JSON: ["tag", ...]
    file_path = Column(String(500), nullable=False)
    file_type = Column(String(20), nullable=False)
    file_size = Column(Integer)
    thumbnail_path = Column(String(500))
    metadata_json = Column("metadata", Text)  # JSON object
    is_public = Column(Boolean, default=True, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)
    download_count = Column(Integer, default=0, nullable=False)

    files = relationship("PresentationFile", back_populates="presentation", passive_deletes=True)
    comments = relationship("Comment", back_populates="presentation", passive_deletes=True)

    __table_args__ = (
        Index("idx_presentation_public_created", "is_public", "date_created"),
        Index("idx_presentation_category", "category"),
    )


class PresentationFile(Base):
    __tablename__ = "files"

    id = Column(String(36), primary_key=True)
    presentation_id = Column(String(36), ForeignKey("presentations.id", ondelete="CASCADE"))
    original_name = Column(String(500), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_type = Column(String(20), nullable=False)
    file_size = Column(Integer)
    mime_type = Column(String(150))
    upload_date = Column(DateTime, default=utcnow, nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)

    presentation = relationship("Presentation", back_populates="files")

    __table_args__ = (
        Index("idx_file_presentation", "presentation_id"),
    )


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True)
    presentation_id = Column(String(36), ForeignKey("presentations.id", ondelete="CASCADE"), nullable=False)
    author_name = Column(String(200))
    author_email = Column(String(200))
    content = Column(Text, nullable=False)
    date_created = Column(DateTime, default=utcnow, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)

    presentation = relationship("Presentation", back_populates="comments")

    __table_args__ = (
        Index("idx_comment_presentation", "presentation_id"),
    )
