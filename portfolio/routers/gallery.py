import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio.cache import page_cache
from portfolio.dao import PhotoDAO
from portfolio.deps import get_db
from portfolio.models import Photo
from portfolio.schemas import AspectRatio, PhotoResponse
from portfolio.services.photo_service import GALLERY_PATH

logger = logging.getLogger(__name__)

router = APIRouter()

templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")


def render_gallery(photos: Sequence[Photo]) -> str:
    return templates.get_template("gallery.html").render(
        photos=[PhotoResponse.from_photo(p) for p in photos],
        aspect_ratios=[ratio.value for ratio in AspectRatio],
        year=datetime.now(UTC).year,
    )


@router.get("/", response_class=HTMLResponse)
def gallery_page(db: Annotated[Session, Depends(get_db)]) -> HTMLResponse:
    """
    Render the gallery, serving the cached page until a create or delete
    revalidates it.
    """
    content = page_cache.get(GALLERY_PATH)
    if content is not None:
        return HTMLResponse(content)
    generation = page_cache.generation(GALLERY_PATH)
    try:
        photos = PhotoDAO(db).list_all()
    except SQLAlchemyError:
        # e.g. tables not created yet; render an empty gallery, uncached
        logger.exception("Error fetching photos")
        return HTMLResponse(render_gallery([]))
    content = render_gallery(photos)
    if not page_cache.set(GALLERY_PATH, content, generation):
        logger.debug("Gallery changed while rendering; page not cached")
    return HTMLResponse(content)
