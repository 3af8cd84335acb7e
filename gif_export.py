import logging
from pathlib import Path

from PIL import Image

from gif_model import Frame, GIFDocument

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


def frame_to_image(frame: Frame) -> Image.Image:
    """Frame as an RGBA image of the frame's own size; transparent pixels get alpha 0."""
    image = Image.new('RGBA', (frame.width, frame.height))
    image.putdata([
        TRANSPARENT if pixel is None else (*pixel, 255) for pixel in frame.pixels
    ])
    return image


def save_frames(document: GIFDocument, directory: Path) -> list[Path]:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    paths = []
    for i, frame in enumerate(document.frames, 1):
        path = directory / f"frame_{i:03d}.png"
        frame_to_image(frame).save(path)
        logger.debug("Saved frame %d to %s", i, path)
        paths.append(path)
    return paths
