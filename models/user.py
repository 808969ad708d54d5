from models.base_model import Base, BaseModel
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    # The one live refresh token; NULL once logged out
    refresh_token = Column(String(1024), nullable=True)

    videos = relationship(
        "Video",
        back_populates="owner",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<User username={self.username}>"
