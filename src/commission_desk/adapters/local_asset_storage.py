"""Local filesystem storage for uploaded images."""

import logging
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os

from commission_desk.domain.errors import WriteFailedError
from commission_desk.services.uploads import AssetStorage

logger = logging.getLogger(__name__)


@dataclass
class LocalAssetStorage(AssetStorage):
    """Writes images into the directory served under ``/uploads``."""

    upload_dir: Path

    def __post_init__(self) -> None:
        self.upload_dir = Path(self.upload_dir)

    def ensure_ready(self) -> None:
        """Create the upload directory."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def save(self, filename: str, data: bytes) -> None:
        """Write ``data`` to ``upload_dir/filename``."""
        if Path(filename).name != filename:
            raise ValueError(f"Unsafe filename: {filename}")
        path = self.upload_dir / filename
        try:
            async with aiofiles.open(path, "wb") as out:
                await out.write(data)
        except OSError as exc:
            logger.exception("Failed to write upload", extra={"stored_as": filename})
            raise WriteFailedError("Could not save uploaded file") from exc

    async def delete(self, filename: str) -> None:
        """Remove ``upload_dir/filename``; a missing file is not an error."""
        if Path(filename).name != filename:
            raise ValueError(f"Unsafe filename: {filename}")
        try:
            await aiofiles.os.remove(self.upload_dir / filename)
        except FileNotFoundError:
            return
        except OSError:
            logger.warning(
                "Failed to remove upload", exc_info=True, extra={"stored_as": filename}
            )
