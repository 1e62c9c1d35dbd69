"""
Raster Images for ESC/POS Printers.

Renders QR matrices to 1-bit Pillow images and packs 1-bit images into the
GS v 0 raster bit image command, used when a printer has no native QR
support.
"""

from typing import Optional

from PIL import Image

from .errors import InvalidOptionError
from .protocol import GS, PrinterCommand, check_range, u16le
from .qr import QRMatrix

# GS v 0 xL xH yL yH: width in bytes and height in dots are 16-bit
MAX_RASTER_WIDTH_BYTES = 0xFFFF
MAX_RASTER_HEIGHT = 0x0FFF


def matrix_to_image(matrix: QRMatrix, module_size: int = 4, border: int = 0) -> Image.Image:
    """
    Render a QR matrix as a 1-bit image.

    Args:
        matrix: Encoded QR symbol
        module_size: Dots per module side (1-16)
        border: Light modules added on every side (the quiet zone)

    Returns:
        Mode "1" image, black modules are 0
    """
    module_size = check_range("QR module size", module_size, 1, 16)
    border = check_range("QR border", border, 0, 16)

    side = (matrix.size + 2 * border) * module_size
    img = Image.new("1", (side, side), color=1)  # White background
    for y, row in enumerate(matrix.modules):
        for x, dark in enumerate(row):
            if dark:
                left = (x + border) * module_size
                top = (y + border) * module_size
                img.paste(0, (left, top, left + module_size, top + module_size))
    return img


def to_bytes(img: Image.Image) -> bytes:
    """
    Convert 1-bit image to raw bitmap bytes.

    Returns packed bytes where each bit represents a pixel, rows padded to
    whole bytes. MSB is leftmost pixel. Black pixels are 1, white are 0.
    """
    if img.mode != "1":
        img = img.convert("1")

    width = img.width
    result = bytearray()
    for row in range(img.height):
        row_bytes = bytearray((width + 7) // 8)
        for col in range(width):
            # In PIL "1" mode, 0 is black
            if img.getpixel((col, row)) == 0:
                row_bytes[col >> 3] |= 0x80 >> (col & 7)
        result.extend(row_bytes)
    return bytes(result)


def raster_command(img: Image.Image, max_width: Optional[int] = None) -> PrinterCommand:
    """
    Build a GS v 0 raster bit image command (normal density).

    Args:
        img: Image to print (converted to 1-bit when needed)
        max_width: Printable width in dots; wider images are rejected

    Raises:
        InvalidOptionError: If the image is empty or too large
    """
    if not isinstance(img, Image.Image):
        raise InvalidOptionError(f"Raster data must be a PIL image, got {type(img).__name__}")
    if img.width == 0 or img.height == 0:
        raise InvalidOptionError("Raster image is empty")
    if max_width is not None and img.width > max_width:
        raise InvalidOptionError(f"Image width {img.width} exceeds printable width {max_width} dots")

    width_bytes = (img.width + 7) // 8
    if width_bytes > MAX_RASTER_WIDTH_BYTES or img.height > MAX_RASTER_HEIGHT:
        raise InvalidOptionError(f"Image dimensions ({img.width}x{img.height}) exceed raster limits")

    header = b"\x00" + u16le(width_bytes) + u16le(img.height)
    return PrinterCommand("raster", GS + b"v0", header + to_bytes(img))
