from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from portfolio.models import Photo


class PhotoDAO:
    """Data Access Object for Photo."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, photo_id: str) -> Photo | None:
        return self.db.get(Photo, photo_id)

    def list_all(self) -> Sequence[Photo]:
        """Every stored photo, newest first."""
        return self.db.query(Photo).order_by(Photo.created_at.desc()).all()

    def create(
        self,
        image_url: str,
        title: str,
        location: str,
        description: str = "",
        technical_details: dict[str, Any] | None = None,
    ) -> Photo:
        photo = Photo(
            image_url=image_url,
            title=title,
            location=location,
            description=description,
            technical_details=technical_details,
        )
        self.db.add(photo)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(photo)
        return photo

    def delete(self, photo_id: str) -> bool:
        photo = self.get(photo_id)
        if photo is None:
            return False
        self.db.delete(photo)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return True
