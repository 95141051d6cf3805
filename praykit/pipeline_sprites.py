"""
Sprite <-> image pipelines.

Exports BLK/S16/C16 frames to PNG images and builds sprite files from
images. Image files are read and written with OpenCV; frames inside praykit
are always RGBA, so channels are swapped at this edge.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

try:
    import cv2
    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

from praykit.package import read_agent_file
from praykit.pixel import PIXEL_FORMAT_565
from praykit.sprites import (
    decode_blk_background,
    decode_sprite,
    encode_blk_background,
    encode_sprite,
    sprite_extension,
)


def _require_cv2() -> None:
    if not HAS_CV2:
        raise ImportError("opencv-python is required for sprite image conversion. Install with: pip install opencv-python")


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Read an image file as an RGBA frame.

    Grayscale and RGB images get an opaque alpha channel.
    """
    _require_cv2()

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Could not read image: {path}")

    if image.dtype != np.uint8:
        image = (image >> 8).astype(np.uint8)
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)


def save_image(path: Union[str, Path], frame: np.ndarray) -> Path:
    """Write an RGBA frame to an image file (PNG keeps the alpha channel)."""
    _require_cv2()

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), cv2.cvtColor(frame, cv2.COLOR_RGBA2BGRA)):
        raise ValueError(f"Could not write image: {path}")
    return path


def export_sprite(
    sprite_file: str,
    output_dir: Union[str, Path],
    agent_file: Optional[str] = None,
    background: bool = False,
) -> List[Path]:
    """
    Export the frames of a sprite file as PNG images.

    Args:
        sprite_file: Path to a sprite file, or its filename inside agent_file
        output_dir: Directory for the PNG files
        agent_file: Read the sprite from this agent file's pool instead of disk
        background: For BLK, write one assembled background image instead of tiles

    Returns:
        Paths of the written images

    Example:
        >>> export_sprite("ball.c16", "frames/")
    """
    _require_cv2()

    name = Path(sprite_file).name
    stem = Path(name).stem

    if background and sprite_extension(name) != "blk":
        raise ValueError(f"Only BLK files have a background: {name}")

    if agent_file:
        print(f"Reading {name} from: {agent_file}")
        record = read_agent_file(agent_file).get_file(name)
        if record is None:
            raise FileNotFoundError(f"{name} is not in {agent_file}")
        data = record.data
    else:
        print(f"Loading sprite: {sprite_file}")
        data = Path(sprite_file).read_bytes()

    if background:
        frames = [decode_blk_background(data)]
    else:
        frames = decode_sprite(name, data)

    output_dir = Path(output_dir)
    written = []
    for i, frame in enumerate(frames):
        written.append(save_image(output_dir / f"{stem}_{i:03d}.png", frame))

    print(f"Exported {len(written)} images to: {output_dir}")
    return written


def build_sprite(
    input_images: Sequence[Union[str, Path]],
    output_sprite: Union[str, Path],
    pixel_format: int = PIXEL_FORMAT_565,
    background: bool = False,
) -> str:
    """
    Build a sprite file from images.

    Args:
        input_images: One image per frame, in frame order
        output_sprite: Output path; its extension picks BLK, S16 or C16
        pixel_format: 2 for 555, 3 for 565
        background: For BLK, cut a single image into 128 x 128 tiles

    Returns:
        Path to created sprite file

    Example:
        >>> build_sprite(["ball_000.png", "ball_001.png"], "ball.c16")
    """
    _require_cv2()

    output_path = Path(output_sprite)
    frames = []
    for path in input_images:
        print(f"Loading image: {path}")
        frames.append(load_image(path))

    if background:
        if sprite_extension(output_path.name) != "blk" or len(frames) != 1:
            raise ValueError("A background build takes a single image and a .blk output")
        height, width = frames[0].shape[:2]
        print(f"Background size: {width} x {height}")
        data = encode_blk_background(frames[0], pixel_format=pixel_format)
    else:
        data = encode_sprite(output_path.name, frames, pixel_format=pixel_format)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)

    print(f"Created: {output_path} ({len(data)} bytes)")
    return str(output_path)
