"""
Material model - study material filed under a material folder
"""
from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, ForeignKey, func
from assessment_engine.database import Base


class Material(Base):
    """
    Materials table - only the storage reference is kept, never the bytes
    """
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)
    folder_id = Column(Integer, ForeignKey("folders.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    file_ref = Column(String(1024), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    def __repr__(self):
        return f"<Material(id={self.id}, folder_id={self.folder_id}, title={self.title})>"
