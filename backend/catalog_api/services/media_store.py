"""
Media store for category and product images.

Files live under ``<root>/<owner_kind>/`` and are addressed by URLs of the
form ``/uploads/<owner_kind>/<uuid><ext>``.
"""

import logging
import os
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence
from urllib.parse import urlparse

from catalog_api.config import Settings
from catalog_api.core.exceptions import BadRequest, InternalError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"
CATEGORIES = "categories"
PRODUCTS = "products"
OWNER_KINDS = (CATEGORIES, PRODUCTS)


@dataclass
class IncomingFile:
    """An uploaded file, already read into memory by the router."""

    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def extension(self) -> str:
        return Path(self.filename or "").suffix.lower()

    @property
    def size(self) -> int:
        return len(self.data)


class MediaStore:
    """Stores, replaces and removes image files on local disk."""

    def __init__(
        self,
        root: os.PathLike,
        allowed_extensions: Sequence[str] = (".jpeg", ".jpg", ".png", ".webp"),
        allowed_mime_types: Sequence[str] = (
            "image/jpeg",
            "image/jpg",
            "image/png",
            "image/webp",
        ),
        max_size: int = 5 * 1024 * 1024,
        max_files: int = 10,
    ):
        self.root = Path(root)
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self.allowed_mime_types = {mime.lower() for mime in allowed_mime_types}
        self.max_size = max_size
        self.max_files = max_files

    @classmethod
    def from_settings(cls, settings: Settings) -> "MediaStore":
        return cls(
            settings.UPLOAD_DIR,
            allowed_extensions=settings.ALLOWED_EXTENSIONS,
            allowed_mime_types=settings.ALLOWED_MIME_TYPES,
            max_size=settings.MAX_UPLOAD_SIZE,
            max_files=settings.MAX_UPLOAD_FILES,
        )

    def ensure_directories(self) -> None:
        for kind in OWNER_KINDS:
            (self.root / kind).mkdir(parents=True, exist_ok=True)

    # --- Validation ---

    def validate(self, file: IncomingFile) -> None:
        """Raise ``BadRequest`` unless the file is an allowed image within limits."""
        content_type = (file.content_type or "").split(";")[0].strip().lower()
        if (
            file.extension not in self.allowed_extensions
            or content_type not in self.allowed_mime_types
        ):
            raise BadRequest("Only image files (jpeg, jpg, png, webp) are allowed")
        if file.size > self.max_size:
            raise BadRequest(
                f"File too large. Max size: {self.max_size / 1024 / 1024:g} MB"
            )

    def validate_many(self, files: Sequence[IncomingFile]) -> None:
        if len(files) > self.max_files:
            raise BadRequest(f"Too many files. Max: {self.max_files}")
        for file in files:
            self.validate(file)

    # --- Operations ---

    def store(self, owner_kind: str, file: IncomingFile) -> str:
        """
        Validate and write one file.

        Returns:
            The relative URL of the stored file.
        """
        if owner_kind not in OWNER_KINDS:
            raise ValueError(f"Unknown owner kind: {owner_kind}")
        self.validate(file)

        directory = self.root / owner_kind
        filename = f"{uuid.uuid4().hex}{file.extension}"
        target = directory / filename
        partial = directory / f".{filename}.part"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(partial, "wb") as f:
                f.write(file.data)
            # Rename into place so a half-written file is never addressable
            os.replace(partial, target)
        except OSError as e:
            logger.error(f"Failed to store {file.filename}: {e}")
            self._discard(partial)
            raise InternalError("Failed to store image")

        url = f"{URL_PREFIX}/{owner_kind}/{filename}"
        logger.info(f"Stored {file.filename} as {url}")
        return url

    def store_many(self, owner_kind: str, files: Sequence[IncomingFile]) -> List[str]:
        """Store a batch; the whole batch is validated before anything is written."""
        self.validate_many(files)
        urls: List[str] = []
        try:
            for file in files:
                urls.append(self.store(owner_kind, file))
        except InternalError:
            self.delete_many(urls)
            raise
        return urls

    @contextmanager
    def replace(
        self,
        old_url: Optional[str],
        file: IncomingFile,
        owner_kind: str,
        base_url: Optional[str] = None,
    ) -> Iterator[str]:
        """
        Store ``file`` and yield its URL for the caller to persist.

        The file behind ``old_url`` is removed (best effort) only when the
        block completes; if it raises, the new file is removed instead.
        """
        url = self.store(owner_kind, file)
        try:
            yield url
        except Exception:
            self.delete(url)
            raise
        if old_url:
            self.delete(old_url, owner_kind=owner_kind, base_url=base_url)

    def delete(
        self,
        url: Optional[str],
        owner_kind: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> bool:
        """
        Best-effort removal. Returns True when a file was removed; never raises.

        See ``path_for`` for which URLs are considered to be in the store.
        """
        path = self.path_for(url, owner_kind=owner_kind, base_url=base_url)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Error deleting image {url}: {e}")
            return False
        logger.info(f"Deleted image {url}")
        return True

    def delete_many(self, urls: Iterable[str]) -> None:
        for url in urls:
            self.delete(url)

    def path_for(
        self,
        url: Optional[str],
        owner_kind: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> Optional[Path]:
        """
        Map a stored URL to a path inside the store, or None.

        Relative URLs always resolve. Absolute URLs resolve only when their
        host matches ``base_url``. With ``owner_kind`` the path must also lie
        in that kind's directory.
        """
        if not url:
            return None
        parsed = urlparse(url)
        if parsed.scheme or parsed.netloc:
            if not base_url or parsed.netloc != urlparse(base_url).netloc:
                return None
        prefix = URL_PREFIX + "/"
        if not parsed.path.startswith(prefix):
            return None
        root = self.root.resolve()
        candidate = (root / parsed.path[len(prefix):]).resolve()
        allowed = root / owner_kind if owner_kind else root
        if allowed not in candidate.parents:
            return None
        return candidate

    def exists(self, url: Optional[str]) -> bool:
        path = self.path_for(url)
        return path is not None and path.is_file()

    @staticmethod
    def absolute_url(base_url: str, url: str) -> str:
        return f"{base_url.rstrip('/')}{url}"

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except OSError as e:
            logger.debug(f"Could not remove partial file {path}: {e}")
