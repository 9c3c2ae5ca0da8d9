import re
from typing import List, Optional

from src.second_brain.models import FileAsset, RecordNotFound, now_iso
from src.second_brain.persistent_state import PersistentStateContainer

DOC_TYPES = re.compile(r"pdf|word|sheet|text|presentation|officedocument", re.IGNORECASE)
MEDIA_TYPES = re.compile(r"image|audio|video", re.IGNORECASE)
TYPE_FILTERS = ("all", "docs", "media", "other")


def file_class(mime_type: str) -> str:
    if DOC_TYPES.search(mime_type or ""):
        return "docs"
    if MEDIA_TYPES.search(mime_type or ""):
        return "media"
    return "other"


class FileLibrary:
    """Uploaded assets kept inline as data URLs."""

    def __init__(self, state: PersistentStateContainer[List[FileAsset]]):
        self.state = state

    def list(self, query: str = "", type_filter: str = "all") -> List[FileAsset]:
        if type_filter not in TYPE_FILTERS:
            raise ValueError(f"Unknown file filter: {type_filter}")
        needle = (query or "").lower()
        results = []
        for asset in self.state.read():
            if needle and needle not in asset.name.lower() and needle not in asset.type.lower():
                continue
            if type_filter != "all" and file_class(asset.type) != type_filter:
                continue
            results.append(asset)
        return results

    def add(self, name: str, size: int, mime_type: Optional[str] = None, data_url: str = "") -> FileAsset:
        if not name:
            raise ValueError("File name is required")
        asset = FileAsset(
            name=name,
            size=size,
            type=mime_type or "application/octet-stream",
            uploaded_at=now_iso(),
            data_url=data_url or "",
        )
        self.state.replace([asset, *self.state.read()])
        return asset

    def delete(self, file_id: str) -> None:
        files = self.state.read()
        if not any(f.id == file_id for f in files):
            raise RecordNotFound(file_id)
        self.state.replace([f for f in files if f.id != file_id])
