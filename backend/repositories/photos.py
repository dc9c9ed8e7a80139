"""
Photo repository backed by SQLAlchemy/SQLite.
"""
from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy.orm import Session, joinedload

from domain.models import PhotoRecord
from repositories.models import CameraORM, FilmStockORM, PhotoORM, UserORM


def _record_from_orm(orm: PhotoORM) -> PhotoRecord:
    return PhotoRecord(
        id=orm.id,
        original_path=orm.original_path,
        camera_name=orm.camera.name if orm.camera else None,
        film_name=orm.film_stock.name if orm.film_stock else None,
        owner_username=orm.user.username if orm.user else None,
        captured_at=orm.taken_at,
        created_at=orm.created_at,
    )


def _new_id() -> str:
    return str(uuid.uuid4())


class PhotosRepository:
    """Read access to photo records, plus creation for seeding."""

    def get_photo(self, session: Session, photo_id: str) -> Optional[PhotoRecord]:
        orm = (
            session.query(PhotoORM)
            .options(
                joinedload(PhotoORM.user),
                joinedload(PhotoORM.camera),
                joinedload(PhotoORM.film_stock),
            )
            .filter(PhotoORM.id == photo_id)
            .first()
        )
        if not orm:
            return None
        return _record_from_orm(orm)

    def get_or_create_user(self, session: Session, username: str) -> UserORM:
        user = session.query(UserORM).filter(UserORM.username == username).first()
        if not user:
            user = UserORM(id=_new_id(), username=username)
            session.add(user)
            session.flush()
        return user

    def create_photo(
        self,
        session: Session,
        original_path: str,
        username: str,
        camera_name: Optional[str] = None,
        film_name: Optional[str] = None,
        taken_at: Optional[datetime] = None,
        photo_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> PhotoRecord:
        user = self.get_or_create_user(session, username)
        camera = None
        if camera_name:
            camera = session.query(CameraORM).filter(CameraORM.name == camera_name).first()
            if not camera:
                camera = CameraORM(id=_new_id(), name=camera_name)
                session.add(camera)
        film = None
        if film_name:
            film = session.query(FilmStockORM).filter(FilmStockORM.name == film_name).first()
            if not film:
                film = FilmStockORM(id=_new_id(), name=film_name)
                session.add(film)

        orm = PhotoORM(
            id=photo_id or _new_id(),
            user=user,
            camera=camera,
            film_stock=film,
            original_path=original_path,
            taken_at=taken_at,
            created_at=created_at or datetime.utcnow(),
        )
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _record_from_orm(orm)
