from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class Video(BaseModel, Base):
    __tablename__ = "videos"

    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_file = Column(String(1024), nullable=False)
    thumbnail = Column(String(1024), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(Float, nullable=False)
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    owner = relationship("User", back_populates="videos")
