import io

import pytest
from PIL import Image


@pytest.fixture
def pillow_gif():
    """Encode Pillow images as GIF bytes: pillow_gif(image, **save_options)."""

    def encode(image: Image.Image, **options) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format="GIF", **options)
        return buffer.getvalue()

    return encode


@pytest.fixture
def paletted_image():
    """P-mode image with a 16-color palette and a diagonal stripe pattern."""

    def make(width: int, height: int) -> Image.Image:
        image = Image.new("P", (width, height))
        palette = []
        for i in range(16):
            palette += [i * 16, 255 - i * 16, (i * 40) % 256]
        image.putpalette(palette)
        image.putdata([(x + 2 * y) % 16 for y in range(height) for x in range(width)])
        return image

    return make
