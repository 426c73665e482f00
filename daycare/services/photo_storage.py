"""Pickup photo files on local disk, served under /uploads/."""

import logging
from pathlib import Path
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.config import get_settings
from daycare.errors import TransactionError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"


def get_upload_root() -> Path:
    return Path(get_settings().UPLOAD_DIR)


def resolve_photo_path(photo_url: str) -> Optional[Path]:
    """Map a public /uploads/<name> URL to a file under the upload root.

    Returns None for URLs stored elsewhere or names escaping the root.
    """
    if not photo_url or not photo_url.startswith(PUBLIC_PREFIX):
        return None
    name = photo_url[len(PUBLIC_PREFIX):]
    if not name or "/" in name or "\\" in name or name in {".", ".."}:
        return None
    return get_upload_root() / name


def remove_photo_files(photo_urls: Iterable[str]) -> int:
    """Delete the files behind ``photo_urls``; returns how many were removed."""
    removed = 0
    for url in photo_urls:
        path = resolve_photo_path(url)
        if path is None:
            continue
        try:
            path.unlink()
            removed += 1
        except FileNotFoundError:
            logger.warning("Pickup photo already gone: %s", path)
        except OSError as exc:
            logger.error("Failed to remove pickup photo %s: %s", path, exc)
    return removed


async def commit_then_remove_photo_files(db: AsyncSession, photo_urls: Iterable[str]) -> int:
    """Commit the deleting transaction, then unlink the files it orphaned.

    When the commit fails the rows survive, so their files are left in place.
    """
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Commit before photo removal failed, files kept: %s", exc)
        raise TransactionError("Deletion could not be committed and was rolled back") from exc
    return remove_photo_files(photo_urls)
