# app/services/file_storage.py

import os
import shutil
from typing import BinaryIO


class LocalFileStorage:
    """Keeps attachment bytes on disk under their assigned unique name."""

    def __init__(self, upload_dir: str):
        self.upload_dir = upload_dir
        os.makedirs(self.upload_dir, exist_ok=True)

    def path_for(self, saved_as: str) -> str:
        # assigned names never carry directories
        return os.path.join(self.upload_dir, os.path.basename(saved_as))

    def save(self, saved_as: str, stream: BinaryIO) -> None:
        with open(self.path_for(saved_as), "wb") as f:
            shutil.copyfileobj(stream, f)

    def exists(self, saved_as: str) -> bool:
        return os.path.isfile(self.path_for(saved_as))

    def delete(self, saved_as: str) -> None:
        path = self.path_for(saved_as)
        if os.path.exists(path):
            os.remove(path)
