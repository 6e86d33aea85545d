"""
Object storage for property images.

Files land under `settings.storage_dir/property-images/<user>/<property>/`
and are served from `settings.media_url`.
"""
import logging
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional

from rentwise.config import get_settings
from rentwise.errors import ConflictError, DataAccessError

logger = logging.getLogger(__name__)

BUCKET = "property-images"
ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}


def _extension(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in ALLOWED_EXTENSIONS:
        raise ConflictError("Error uploading image", f"Unsupported file type: {filename}")
    return ext


def save_property_image(user_id: str, property_id: str, filename: str, data: BinaryIO,
                        storage_dir: Optional[Path] = None) -> str:
    """Store an uploaded image and return its public URL."""
    settings = get_settings()
    root = Path(storage_dir or settings.storage_dir)
    relative = Path(BUCKET) / user_id / property_id / f"{int(time.time() * 1000)}.{_extension(filename)}"
    target = root / relative
    target.parent.mkdir(parents=True, exist_ok=True)

    # Write to temp file first, then atomic rename
    tmp = target.with_suffix(target.suffix + ".tmp")
    try:
        with open(tmp, "wb") as f:
            shutil.copyfileobj(data, f)
        tmp.replace(target)
    except OSError as e:
        if tmp.exists():
            tmp.unlink()
        logger.error(f"[STORAGE] Failed to save {relative}: {e}")
        raise DataAccessError("Error uploading image", str(e)) from e

    logger.info(f"[STORAGE] Saved {relative} ({target.stat().st_size} bytes)")
    return f"{settings.media_url.rstrip('/')}/{relative.as_posix()}"


def delete_object(url: str, storage_dir: Optional[Path] = None) -> bool:
    """Remove a stored object by its public URL. Returns False if it was not ours or missing."""
    settings = get_settings()
    prefix = settings.media_url.rstrip("/") + "/"
    if not url.startswith(prefix):
        return False
    target = Path(storage_dir or settings.storage_dir) / url[len(prefix):]
    if target.exists():
        target.unlink()
        return True
    return False
