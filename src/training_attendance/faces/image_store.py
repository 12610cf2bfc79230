from __future__ import annotations

import base64
import binascii
import uuid
from pathlib import Path
from typing import Protocol

from ..core.exceptions import ValidationError


class ImageStore(Protocol):
    def upload(self, image_base64: str, folder: str) -> str:
        """Persist a base64 image and return a durable URL the face matcher can fetch."""

        raise NotImplementedError


def decode_base64_image(image_base64: str) -> bytes:
    data = (image_base64 or "").strip()
    # may include "data:image/jpeg;base64," prefix
    if "," in data:
        data = data.split(",", 1)[1]
    if not data:
        raise ValidationError("Ảnh khuôn mặt không được để trống")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Ảnh không hợp lệ")


class LocalImageStore(ImageStore):
    """Writes uploads under `upload_dir/<folder>/` and serves them from `base_url`."""

    def __init__(self, upload_dir: str | Path, base_url: str):
        self._upload_dir = Path(upload_dir)
        self._base_url = base_url.rstrip("/")

    def upload(self, image_base64: str, folder: str) -> str:
        content = decode_base64_image(image_base64)

        directory = self._upload_dir / folder
        directory.mkdir(parents=True, exist_ok=True)

        filename = f"{uuid.uuid4().hex}.jpg"
        (directory / filename).write_bytes(content)
        return f"{self._base_url}/{folder}/{filename}"
