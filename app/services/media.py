# services/media.py
"""
Event media on the local filesystem.

Files live under MEDIA_ROOT/diarios/<journal_id>/ and are exposed to clients
as /media/diarios/<journal_id>/<file>. Removal is best-effort: a failure is
logged and never blocks the database change that triggered it.
"""
import logging
import os
import secrets
import shutil
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import ValidationError, PayloadTooLargeError

logger = logging.getLogger(__name__)

ALLOWED_MEDIA_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "video/mp4",
    "video/quicktime",
}
MEDIA_URL_PREFIX = "/media"
JOURNALS_DIR = "diarios"
CHUNK_SIZE = 1024 * 1024


class MediaStorage:
    """Saves and removes uploaded event media for journals."""

    def __init__(self, root: Path, max_bytes: int):
        self.root = Path(root)
        self.max_bytes = max_bytes

    # =====================================================================
    # PATHS
    # =====================================================================

    def journal_dir(self, journal_id: int) -> Path:
        return self.root / JOURNALS_DIR / str(journal_id)

    @staticmethod
    def generate_filename(original_filename: Optional[str], field_name: str = "media") -> str:
        """<field>-<unix ms>-<random 9 digits><ext>, unique enough to never collide in practice."""
        extension = Path(original_filename or "").suffix.lower()
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9):09d}"
        return f"{field_name}-{unique_suffix}{extension}"

    def public_path(self, journal_id: int, filename: str) -> str:
        return f"{MEDIA_URL_PREFIX}/{JOURNALS_DIR}/{journal_id}/{filename}"

    def resolve(self, media_path: str) -> Optional[Path]:
        """Map a public media path back to a file under the root; None if it points elsewhere."""
        prefix = MEDIA_URL_PREFIX + "/"
        if not media_path or not media_path.startswith(prefix):
            return None
        root = self.root.resolve()
        candidate = (root / media_path[len(prefix):]).resolve()
        if root not in candidate.parents:
            return None
        return candidate

    # =====================================================================
    # SAVE
    # =====================================================================

    def save(self, journal_id: int, upload: UploadFile) -> str:
        """
        Stream *upload* into the journal's media directory.

        Args:
            journal_id: Journal the media belongs to
            upload: Incoming multipart file

        Returns:
            Public media path to store on the event

        Raises:
            ValidationError: If the content type is not an allowed image/video type
            PayloadTooLargeError: If the file exceeds the size limit
        """
        if upload.content_type not in ALLOWED_MEDIA_TYPES:
            raise ValidationError("media: file type not allowed, only images and videos are accepted")

        directory = self.journal_dir(journal_id)
        directory.mkdir(parents=True, exist_ok=True)
        filename = self.generate_filename(upload.filename)
        target = directory / filename

        written = 0
        try:
            with open(target, "wb") as out:
                while True:
                    chunk = upload.file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise PayloadTooLargeError(
                            f"media: file too large, limit is {self.max_bytes // (1024 * 1024)}MB"
                        )
                    out.write(chunk)
        except Exception:
            target.unlink(missing_ok=True)
            raise

        logger.info(f"Stored media {target} ({written} bytes)")
        return self.public_path(journal_id, filename)

    # =====================================================================
    # REMOVE (best-effort)
    # =====================================================================

    def remove(self, media_path: Optional[str]) -> bool:
        """Delete a stored media file. Returns True if a file was removed."""
        if not media_path:
            return False
        target = self.resolve(media_path)
        if target is None:
            logger.warning(f"Refusing to remove media outside the media root: {media_path}")
            return False
        try:
            if target.exists():
                os.remove(target)
                logger.info(f"Removed media {target}")
                return True
        except OSError as exc:
            logger.error(f"Failed to remove media {target}: {exc}")
        return False

    def remove_journal_dir(self, journal_id: int) -> None:
        directory = self.journal_dir(journal_id)
        if not directory.exists():
            return
        try:
            shutil.rmtree(directory)
            logger.info(f"Removed media directory {directory}")
        except OSError as exc:
            logger.error(f"Failed to remove media directory {directory}: {exc}")


def get_media_storage() -> MediaStorage:
    """Dependency returning the media storage for the configured root."""
    return MediaStorage(Path(settings.MEDIA_ROOT), settings.MAX_UPLOAD_BYTES)
