import os
import json
from docchat.models.document import StoredFile
from docchat.storage.base import FileStore

class LocalFileStore(FileStore):
    """
    Implements FileStore using the local disk.
    - Raw upload bytes in <document_id>.bin
    - Declared mime type in a <document_id>.json sidecar
    """

    def __init__(self, uploads_path: str = "./data/uploads"):
        self.uploads_path = uploads_path
        os.makedirs(self.uploads_path, exist_ok=True)

    def _paths(self, document_id: int) -> tuple[str, str]:
        base = os.path.join(self.uploads_path, str(document_id))
        return f"{base}.bin", f"{base}.json"

    def save(self, document_id: int, data: bytes, mime_type: str) -> str:
        data_path, meta_path = self._paths(document_id)
        with open(data_path, "wb") as f:
            f.write(data)
        with open(meta_path, "w", encoding="utf-8") as f:
            json.dump({"mime_type": mime_type, "size": len(data)}, f)
        return data_path

    def load(self, document_id: int) -> StoredFile:
        data_path, meta_path = self._paths(document_id)
        if not os.path.exists(data_path) or not os.path.exists(meta_path):
            raise FileNotFoundError(f"No stored upload for document {document_id}")

        with open(data_path, "rb") as f:
            data = f.read()
        with open(meta_path, "r", encoding="utf-8") as f:
            meta = json.load(f)

        return StoredFile(data=data, mime_type=meta["mime_type"])

    def delete(self, document_id: int) -> None:
        for path in self._paths(document_id):
            if os.path.exists(path):
                os.remove(path)
