"""
Database Models using SQLAlchemy.

These define the schema for users, their graphs and the share grants on them.
They are NOT related to the API schemas (see flowpad.schemas.api_schemas).
"""
from sqlalchemy import Column, ForeignKey, Integer, String, DateTime, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship
import datetime

Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    google_id = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    graphs = relationship("Graph", back_populates="owner", cascade="all, delete-orphan")


class Graph(Base):
    __tablename__ = "graphs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    data = Column(JSONDocument, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    # Relationships
    owner = relationship("User", back_populates="graphs")
    shares = relationship("GraphShare", back_populates="graph", cascade="all, delete-orphan")


class GraphShare(Base):
    __tablename__ = "graph_shares"
    __table_args__ = (
        UniqueConstraint("graph_id", "shared_with_email", name="uq_graph_shares_graph_email"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    graph_id = Column(Integer, ForeignKey("graphs.id", ondelete="CASCADE"), nullable=False)
    shared_with_email = Column(String(255), nullable=False, index=True)
    shared_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    permission = Column(String(16), nullable=False, default="viewer")
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    graph = relationship("Graph", back_populates="shares")
