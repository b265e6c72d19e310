"""Generate the bundled default tab icon."""

import logging
import os

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger("ShimTabs.Icons")


def create_icon(size, output_path, letter="T"):
    """Create a simple icon with a letter on a colored background."""
    img = Image.new("RGB", (size, size), color="#4A90E2")
    draw = ImageDraw.Draw(img)

    try:
        font = ImageFont.truetype("arial.ttf", int(size * 0.6))
    except OSError:
        font = ImageFont.load_default()

    # Center the letter on its bounding box
    bbox = draw.textbbox((0, 0), letter, font=font)
    text_width = bbox[2] - bbox[0]
    text_height = bbox[3] - bbox[1]
    x = (size - text_width) // 2 - bbox[0]
    y = (size - text_height) // 2 - bbox[1]

    draw.text((x, y), letter, fill="white", font=font)

    img.save(output_path, "PNG")
    logger.info(f"Created {output_path} ({size}x{size})")


def ensure_default_icon(path, size=64):
    """Create the default icon at ``path`` unless it already exists.

    Returns:
        str: The icon path
    """
    if os.path.isfile(path):
        return path
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    create_icon(size, path)
    return path


if __name__ == "__main__":
    ensure_default_icon(os.path.join("Images", "icon.png"))
