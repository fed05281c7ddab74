import os
import time
import uuid
from typing import Callable, Optional

from ...config import settings
from ...application.ports.upload_store import UploadStore


class LocalUploadStore(UploadStore):
    def __init__(self, upload_dir: Optional[str] = None, clock: Callable[[], float] = time.time) -> None:
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self._clock = clock

    def save(self, subdir: str, filename: str, data: bytes) -> str:
        # Keep only the extension of the client-supplied name
        extension = os.path.splitext(os.path.basename(filename or ""))[1].lower()
        stored_name = f"{int(self._clock()*1000)}-{uuid.uuid4().hex[:8]}{extension}"
        dest_dir = os.path.join(self.upload_dir, subdir) if subdir else self.upload_dir
        os.makedirs(dest_dir, exist_ok=True)
        path = os.path.join(dest_dir, stored_name)
        with open(path, "wb") as f:
            f.write(data)
        return path
