from typing import Protocol


class UploadStore(Protocol):
    def save(self, subdir: str, filename: str, data: bytes) -> str:
        """Persist an uploaded file and return its server-local path."""
        ...
