"""
SQLAlchemy ORM models for persistence.
"""
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from db import Base


class UserORM(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    photos = relationship("PhotoORM", back_populates="user")


class CameraORM(Base):
    __tablename__ = "cameras"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)


class FilmStockORM(Base):
    __tablename__ = "film_stocks"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)


class PhotoORM(Base):
    __tablename__ = "photos"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    camera_id = Column(String, ForeignKey("cameras.id"), nullable=True)
    film_stock_id = Column(String, ForeignKey("film_stocks.id"), nullable=True)
    original_path = Column(String, nullable=False)
    taken_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("UserORM", back_populates="photos")
    camera = relationship("CameraORM")
    film_stock = relationship("FilmStockORM")
