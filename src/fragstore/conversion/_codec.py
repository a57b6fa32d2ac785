"""ImageCodec: raster re-encoding between image container formats."""

from __future__ import annotations

import io
from collections.abc import Mapping
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from PIL import Image

PILLOW_FORMATS: Mapping[str, str] = MappingProxyType(
    {
        "image/png": "PNG",
        "image/jpeg": "JPEG",
        "image/webp": "WEBP",
        "image/gif": "GIF",
        "image/avif": "AVIF",
    }
)

# JPEG has no alpha channel or palette.
_JPEG_MODES = frozenset({"RGB", "L", "CMYK"})


@runtime_checkable
class ImageCodec(Protocol):
    """Image re-encoding capability used by the conversion engine."""

    def encode(self, data: bytes, target: str) -> bytes:
        """Decode ``data`` and re-encode it as ``target``. Raise ValueError on failure."""
        ...


class PillowImageCodec:
    """ImageCodec backed by Pillow."""

    def encode(self, data: bytes, target: str) -> bytes:
        """Decode ``data`` and re-encode it in the container format for ``target``."""
        image_format = PILLOW_FORMATS.get(target)
        if image_format is None:
            msg = f"no encoder for {target}"
            raise ValueError(msg)

        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                output = image
                if image_format == "JPEG" and image.mode not in _JPEG_MODES:
                    output = image.convert("RGB")
                buffer = io.BytesIO()
                output.save(buffer, format=image_format)
        except (OSError, KeyError, ValueError, Image.DecompressionBombError) as exc:
            msg = f"unable to encode image as {target}: {exc}"
            raise ValueError(msg) from exc
        return buffer.getvalue()
