"""
Folder model - parent-pointer tree grouping quizzes and materials
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, TIMESTAMP, ForeignKey, func
from assessment_engine.database import Base


class Folder(Base):
    """
    Folders table - one tree per namespace ("quiz" or "material")
    """
    __tablename__ = "folders"

    id = Column(Integer, primary_key=True, index=True)
    namespace = Column(String(20), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    parent_id = Column(Integer, ForeignKey("folders.id"), index=True)  # NULL marks a root
    position = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Folder(id={self.id}, namespace={self.namespace}, title={self.title}, parent_id={self.parent_id})>"
