from __future__ import annotations

from io import BytesIO
from typing import Tuple

import torch
from PIL import Image, UnidentifiedImageError
from torchvision import transforms

# (y_min, x_min, y_max, x_max) as fractions of the image height/width.
Box = Tuple[float, float, float, float]
FULL_FRAME_BOX: Box = (0.0, 0.0, 1.0, 1.0)


class InvalidImageError(ValueError):
    """Uploaded bytes could not be decoded as an image."""


def load_image(data: bytes) -> Image.Image:
    """Read raw bytes into a RGB PIL image."""
    try:
        with BytesIO(data) as buf:
            img = Image.open(buf)
            return img.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise InvalidImageError(f"Could not decode image: {exc}") from exc


def _clamp(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def crop_box(image: Image.Image, box: Box = FULL_FRAME_BOX) -> Image.Image:
    """Crop a fractional region out of ``image``."""
    y_min, x_min, y_max, x_max = (_clamp(v) for v in box)
    if y_max <= y_min or x_max <= x_min:
        raise ValueError(f"Degenerate crop box: {box}")

    width, height = image.size
    left = int(round(x_min * width))
    top = int(round(y_min * height))
    right = max(left + 1, int(round(x_max * width)))
    bottom = max(top + 1, int(round(y_max * height)))
    if (left, top, right, bottom) == (0, 0, width, height):
        return image
    return image.crop((left, top, right, bottom))


def build_transform(size: int = 224) -> transforms.Compose:
    # ToTensor scales to [0, 1]; the models are trained without mean/std normalisation.
    return transforms.Compose(
        [
            transforms.Resize((size, size)),
            transforms.ToTensor(),
        ]
    )


def to_input_tensor(
    image: Image.Image,
    box: Box = FULL_FRAME_BOX,
    size: int = 224,
) -> torch.Tensor:
    """Crop, resize and scale an image into a ``(1, 3, size, size)`` float tensor."""
    region = crop_box(image.convert("RGB"), box)
    return build_transform(size)(region).unsqueeze(0)
