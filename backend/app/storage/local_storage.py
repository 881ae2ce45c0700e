import uuid
from pathlib import Path
from fastapi import UploadFile
from app.core.config import settings


class LocalStorage:
    def __init__(self, upload_dir: str | None = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.avatar_dir = self.upload_dir / "avatars"
        self.avatar_dir.mkdir(parents=True, exist_ok=True)

    async def save_avatar(self, file: UploadFile) -> str:
        """Save an uploaded avatar and return its path"""
        # Generate unique filename, keeping only the extension from the client
        file_ext = Path(file.filename).suffix.lower()
        file_path = self.avatar_dir / f"{uuid.uuid4()}{file_ext}"

        with open(file_path, "wb") as f:
            content = await file.read()
            f.write(content)

        return str(file_path)

    def delete_avatar(self, file_path: str) -> bool:
        """Delete an avatar by the path save_avatar returned"""
        path = Path(file_path)
        if path.exists():
            path.unlink()
            return True
        return False

    def list_avatars(self) -> list[Path]:
        """List avatar files currently on disk"""
        return [path for path in self.avatar_dir.iterdir() if path.is_file()]


storage = LocalStorage()
