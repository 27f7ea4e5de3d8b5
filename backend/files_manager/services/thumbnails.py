"""Image resizing with Pillow."""
from io import BytesIO

from PIL import Image

# Formats Pillow can read but not write back; derivatives fall back to PNG
_FALLBACK_FORMAT = "PNG"


def render_thumbnail(source: bytes, width: int) -> bytes:
    """Resize `source` to `width` pixels wide, keeping the aspect ratio.

    The derivative keeps the source's format when Pillow can write it.

    Raises:
        PIL.UnidentifiedImageError: `source` is not an image.
    """
    with Image.open(BytesIO(source)) as img:
        fmt = img.format if img.format in Image.SAVE else _FALLBACK_FORMAT
        height = max(1, round(img.height * width / img.width))
        resized = img.resize((width, height), Image.Resampling.LANCZOS)
        if fmt == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")

        out = BytesIO()
        resized.save(out, format=fmt)
        return out.getvalue()
