import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class MediaResolver:
    """Maps media URLs from the editor to files on the local filesystem.

    Absolute URLs under ``base_url`` and root-relative URLs (``/uploads/...``)
    are both resolved against ``media_root``.
    """

    def __init__(self, media_root: str | Path, base_url: str = ""):
        self.media_root = Path(media_root)
        self.base_url = base_url

    def to_local_path(self, url: str) -> Path:
        if self.base_url and url.startswith(self.base_url):
            relative = url[len(self.base_url):]
        else:
            relative = url
        return self.media_root / relative.lstrip("/")

    def resolve(self, url: str) -> Path | None:
        """Return the local path for ``url`` if the file exists, else None."""
        if not url:
            return None
        path = self.to_local_path(url)
        if not path.resolve().is_relative_to(self.media_root.resolve()):
            logger.warning(f"[MEDIA] Refusing path outside media root: {url}")
            return None
        if not path.is_file():
            logger.debug(f"[MEDIA] {url} -> {path} (missing)")
            return None
        return path
