# Database Models for the Creator Campaign Platform
# Identity-side tables: users and the brands they belong to

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Enum, Boolean
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import uuid
import enum

Base = declarative_base()

def generate_uuid():
    return str(uuid.uuid4())

# Enums
class UserTypeDB(str, enum.Enum):
    ADMIN = "admin"
    BRAND_OWNER = "brand_owner"
    BRAND_EMP = "brand_emp"
    CREATOR = "creator"


# Models
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255))
    # Mirrors the role claim issued by the identity provider
    user_type = Column(Enum(UserTypeDB, values_callable=lambda x: [e.value for e in x], name="usertypedb"), nullable=False, default=UserTypeDB.CREATOR)
    brand_id = Column(String(36), ForeignKey("brands.id", ondelete="SET NULL"), nullable=True)  # brand_owner / brand_emp only
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    brand = relationship("Brand", back_populates="members")
    creator_profile = relationship("CreatorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")

    @property
    def display_name(self):
        if self.creator_profile and self.creator_profile.display_name:
            return self.creator_profile.display_name
        return self.name or self.email


class Brand(Base):
    __tablename__ = "brands"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    industry = Column(String(255))
    description = Column(Text)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    members = relationship("User", back_populates="brand")
    campaigns = relationship("Campaign", back_populates="brand")



class CreatorProfile(Base):
    """Creator-side profile used for shortlist targeting and default pricing."""
    __tablename__ = "creator_profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    display_name = Column(String(100), nullable=False)
    category = Column(String(100))
    followers = Column(Integer, default=0)
    avg_views = Column(Integer, default=0)
    channel_url = Column(String(500))

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="creator_profile")
