from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func
import enum
import uuid_utils
import uuid


def generate_uuid7():
    """Generate UUIDv7 and convert to standard Python UUID"""
    uuid7_obj = uuid_utils.uuid7()
    return uuid.UUID(str(uuid7_obj))

Base = declarative_base()


class NewsType(str, enum.Enum):
    ORIGINAL = "original"
    SCRAPED = "scraped"


class User(Base):
    __tablename__ = 'users'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid7)
    name = Column(String(200), nullable=False)
    email = Column(String(320), unique=True, nullable=False)
    role = Column(String(20), nullable=False, default="user")
    plan = Column(String(20), nullable=False, default="free")
    created_at = Column(DateTime, default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', plan='{self.plan}')>"


class Category(Base):
    __tablename__ = 'categories'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid7)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    news = relationship("News", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class News(Base):
    __tablename__ = 'news'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid7)
    title = Column(String(255), nullable=False)
    # The unique index on slug is the only deduplication mechanism.
    slug = Column(String(255), unique=True, nullable=False, index=True)
    summary = Column(Text)
    content = Column(Text, nullable=False)
    image_url = Column(String(500))
    source_url = Column(String(500))
    type = Column(
        Enum(NewsType, name="news_type", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=NewsType.ORIGINAL,
    )
    published_at = Column(DateTime, index=True)
    is_published = Column(Boolean, nullable=False, default=False)
    views = Column(Integer, nullable=False, default=0)
    category_id = Column(Uuid(as_uuid=True), ForeignKey('categories.id'), nullable=False, index=True)
    author_id = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", back_populates="news")

    def __repr__(self):
        return (
            f"<News(id={self.id}, type='{self.type}', title='{self.title[:30]}...', "
            f"slug='{self.slug}')>"
        )


class Source(Base):
    __tablename__ = 'sources'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=generate_uuid7)
    name = Column(String(200), unique=True, nullable=False)
    url = Column(String(2000), nullable=False)
    description = Column(String(500))
    # articleSelector, titleSelector, linkSelector, imageSelector, summarySelector
    selectors = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    last_scraped_at = Column(DateTime)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Source(id={self.id}, name='{self.name}', url='{self.url}', active={self.is_active})>"
