from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from portfolio.dao import PhotoDAO
from portfolio.database import SessionLocal
from portfolio.services.photo_service import PhotoService
from portfolio.storage import BlobStorage, get_storage_backend


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session and closes it when done.
    This function creates a new database session and ensures it's properly
    closed when the request is complete, regardless of whether an exception
    occurs. It uses FastAPI's dependency injection system.
    Yields:
        Session: SQLAlchemy database session
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage() -> BlobStorage:
    return get_storage_backend()


def get_photo_service(db: Annotated[Session, Depends(get_db)]) -> PhotoService:
    """Service for listing and deleting, which never touch the blob store."""
    return PhotoService(PhotoDAO(db))


def get_upload_service(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
) -> PhotoService:
    return PhotoService(PhotoDAO(db), storage)
