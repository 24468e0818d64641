"""Post image upload.

Learn: Images travel over plain multipart REST rather than GraphQL. The
client uploads first, then passes the returned filePath as imageUrl in
createPost/updatePost. When replacing an image it also sends the old
path, which is deleted here on a best-effort basis.

    PUT /post-image   (multipart: image, oldPath?)
    201 {"message": "File stored.", "filePath": "images/<name>"}
    200 {"message": "No file provided!"}   no file, or not png/jpg/jpeg
    401 {"message": "Not authenticated!"}
"""

import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from inkpost.auth.dependencies import RequestIdentity, require_identity
from inkpost.config import settings

logger = structlog.get_logger()

router = APIRouter()

ALLOWED_TYPES = {"image/png", "image/jpg", "image/jpeg"}


def stored_name(original: str, now: Optional[datetime] = None) -> str:
    """Timestamp-prefixed file name, e.g. 2024-05-01T10:00:00.000Z-cat.png."""
    stamp = (now or datetime.now(timezone.utc)).isoformat(timespec="milliseconds")
    return f"{stamp.replace('+00:00', 'Z')}-{Path(original).name}"


def clear_image(file_path: str) -> None:
    """Delete a previously stored image. Failures are logged, never raised."""
    # Only the basename is trusted; the file must live in image_dir
    target = Path(settings.image_dir) / PurePosixPath(file_path).name
    try:
        target.unlink()
        logger.info("inkpost.image.cleared", path=str(target))
    except OSError as e:
        logger.warning("inkpost.image.clear_failed", path=str(target), error=str(e))


@router.put("/post-image", status_code=201)
async def upload_post_image(
    image: Optional[UploadFile] = File(None),
    old_path: Optional[str] = Form(None, alias="oldPath"),
    identity: RequestIdentity = Depends(require_identity),
):
    if image is None or not image.filename or image.content_type not in ALLOWED_TYPES:
        return JSONResponse(status_code=200, content={"message": "No file provided!"})

    image_dir = Path(settings.image_dir)
    image_dir.mkdir(parents=True, exist_ok=True)
    name = stored_name(image.filename)
    with (image_dir / name).open("wb") as out:
        shutil.copyfileobj(image.file, out)

    if old_path:
        clear_image(old_path)

    file_path = f"{PurePosixPath(settings.image_dir).name}/{name}"
    logger.info("inkpost.image.stored", path=file_path, user_id=identity.user_id)
    return {"message": "File stored.", "filePath": file_path}
