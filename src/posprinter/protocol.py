"""
ESC/POS Protocol Definitions.

Byte constants, parameter enums and the immutable command record shared by
the command builder and the symbol encoders.

Command layouts follow the Epson ESC/POS Command Reference:

    ESC @            Initialize printer
    ESC a n          Justification
    GS ! n           Character size
    GS k m n d1..dn  Print barcode (function B)
    GS ( k ...       QR code (function 165-181)
    GS v 0 ...       Raster bit image
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .errors import InvalidOptionError

NUL = b"\x00"
LF = b"\x0a"
ESC = b"\x1b"
GS = b"\x1d"


class JustifyMode(IntEnum):
    """Text justification (ESC a)."""
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class Font(IntEnum):
    """Character font (ESC M)."""
    A = 0
    B = 1
    C = 2


class UnderlineMode(IntEnum):
    """Underline thickness (ESC -)."""
    NONE = 0
    SINGLE = 1   # 1-dot
    DOUBLE = 2   # 2-dot


class HriPosition(IntEnum):
    """Printing position of human readable characters under/over a barcode (GS H)."""
    NONE = 0
    ABOVE = 1
    BELOW = 2
    BOTH = 3


class HriFont(IntEnum):
    """Font of human readable characters (GS f)."""
    A = 0
    B = 1


class CashDrawerPin(IntEnum):
    """Drawer kick-out connector pin (ESC p m)."""
    PIN2 = 0
    PIN5 = 1


class PageCode(IntEnum):
    """Character code tables selectable with ESC t n."""
    PC437 = 0
    KATAKANA = 1
    PC850 = 2
    PC860 = 3
    PC863 = 4
    PC865 = 5
    PC851 = 11
    PC853 = 12
    PC857 = 13
    PC737 = 14
    ISO8859_7 = 15
    WPC1252 = 16
    PC866 = 17
    PC852 = 18
    PC858 = 19
    WPC775 = 33
    PC855 = 34
    PC861 = 35
    PC862 = 36
    PC869 = 38
    ISO8859_2 = 39
    ISO8859_15 = 40
    PC1118 = 42
    PC1119 = 43
    PC1125 = 44
    WPC1250 = 45
    WPC1251 = 46
    WPC1253 = 47
    WPC1254 = 48
    WPC1257 = 51
    KZ1048 = 53

    @property
    def codec(self) -> Optional[str]:
        """Python codec for the table, or None when only ASCII is mapped."""
        return _PAGE_CODE_CODECS.get(self)

    def encode(self, text: str) -> bytes:
        """
        Encode text for this code table.

        Raises:
            InvalidOptionError: If a character has no slot in the table
        """
        codec = self.codec or "ascii"
        try:
            return text.encode(codec)
        except UnicodeEncodeError as e:
            raise InvalidOptionError(
                f"Character {text[e.start:e.end]!r} cannot be printed with page code {self.name}"
            ) from e


# Tables without a Python codec (KATAKANA, PC851, PC853, PC1118, PC1119)
# only accept their ASCII half.
_PAGE_CODE_CODECS = {
    PageCode.PC437: "cp437",
    PageCode.PC850: "cp850",
    PageCode.PC860: "cp860",
    PageCode.PC863: "cp863",
    PageCode.PC865: "cp865",
    PageCode.PC857: "cp857",
    PageCode.PC737: "cp737",
    PageCode.ISO8859_7: "iso8859_7",
    PageCode.WPC1252: "cp1252",
    PageCode.PC866: "cp866",
    PageCode.PC852: "cp852",
    PageCode.PC858: "cp858",
    PageCode.WPC775: "cp775",
    PageCode.PC855: "cp855",
    PageCode.PC861: "cp861",
    PageCode.PC862: "cp862",
    PageCode.PC869: "cp869",
    PageCode.ISO8859_2: "iso8859_2",
    PageCode.ISO8859_15: "iso8859_15",
    PageCode.PC1125: "cp1125",
    PageCode.WPC1250: "cp1250",
    PageCode.WPC1251: "cp1251",
    PageCode.WPC1253: "cp1253",
    PageCode.WPC1254: "cp1254",
    PageCode.WPC1257: "cp1257",
    PageCode.KZ1048: "kz1048",
}


@dataclass(frozen=True)
class PrinterCommand:
    """A single printer instruction: opcode bytes plus parameter payload."""
    name: str
    opcode: bytes
    payload: bytes = b""

    def encode(self) -> bytes:
        """Encode command to bytes for transmission."""
        return self.opcode + self.payload

    def __len__(self) -> int:
        return len(self.opcode) + len(self.payload)


def check_range(name: str, value: int, low: int = 0, high: int = 255) -> int:
    """
    Validate a numeric command parameter.

    Returns:
        The value as int

    Raises:
        InvalidOptionError: If value is not an integer in [low, high]
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidOptionError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise InvalidOptionError(f"{name} must be between {low} and {high}, got {value}")
    return value


def u16le(value: int) -> bytes:
    """Pack as the (nL, nH) little-endian pair used by ESC/POS length fields."""
    return bytes([value & 0xFF, (value >> 8) & 0xFF])
