import shutil
import uuid
from pathlib import Path

from starlette.datastructures import UploadFile

from bookstore.core.errors import InvalidInputError

_ALLOWED_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class CoverStore:
    """Keeps uploaded book covers on local disk, served under /uploads."""

    def __init__(self, directory: str | Path, url_prefix: str = "/uploads"):
        self.directory: Path = Path(directory)
        self.url_prefix: str = url_prefix.rstrip("/")

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def save(self, upload: UploadFile) -> str:
        """Write the upload and return its public path."""
        suffix = _ALLOWED_TYPES.get(upload.content_type or "")
        if suffix is None:
            raise InvalidInputError(
                "Cover must be an image",
                details={"content_type": upload.content_type},
            )

        self.ensure_directory()
        name = f"{uuid.uuid4().hex}{suffix}"
        with (self.directory / name).open("wb") as out:
            shutil.copyfileobj(upload.file, out)
        return f"{self.url_prefix}/{name}"

    def discard(self, public_path: str | None) -> None:
        """Remove a stored cover; paths outside this store are ignored."""
        if not public_path or not public_path.startswith(f"{self.url_prefix}/"):
            return
        name = Path(public_path).name
        (self.directory / name).unlink(missing_ok=True)
