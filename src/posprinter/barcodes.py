"""
Barcode Encoding for ESC/POS Printers.

Validates barcode data against each symbology's charset and length rules,
computes check digits, and builds the native GS k (function B) command
preceded by the barcode option commands.

Each symbology has its own data function so leading zeros, optional check
characters and start/stop rules stay local to that symbology.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from .errors import InvalidOptionError
from .protocol import GS, HriFont, HriPosition, PrinterCommand, check_range

DIGITS = "0123456789"
CODE39_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-. $/+%"
CODABAR_CHARS = "0123456789-$:/.+"
CODABAR_START_STOP = "ABCDabcd"

# Code128 control sequences (GS k 73): code set selection, shift, escaped brace
CODE128_SELECT = {"A": b"{A", "B": b"{B", "C": b"{C"}
CODE128_SHIFT = b"{S"
CODE128_BRACE = b"{{"

MAX_DATA_LENGTH = 255


class Symbology(Enum):
    """Barcode systems with their GS k function B identifier."""
    UPC_A = "UPC-A"
    UPC_E = "UPC-E"
    EAN13 = "EAN13"
    EAN8 = "EAN8"
    CODE39 = "CODE39"
    ITF = "ITF"
    CODABAR = "CODABAR"
    CODE93 = "CODE93"
    CODE128 = "CODE128"

    @property
    def system(self) -> int:
        """The m byte of GS k m n d1...dn."""
        return _SYSTEM_IDS[self]

    @classmethod
    def from_name(cls, name: Union[str, "Symbology"]) -> "Symbology":
        """Look up a symbology by value or member name, ignoring case and dashes."""
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            raise InvalidOptionError(f"Invalid barcode type: {name!r}")
        key = name.upper().replace("-", "").replace("_", "")
        for symbology in cls:
            if key in (symbology.value.replace("-", ""), symbology.name.replace("_", "")):
                return symbology
        raise InvalidOptionError(
            f"Invalid barcode type: {name}. Supported types: {[s.value for s in cls]}"
        )


_SYSTEM_IDS = {
    Symbology.UPC_A: 65,
    Symbology.UPC_E: 66,
    Symbology.EAN13: 67,
    Symbology.EAN8: 68,
    Symbology.CODE39: 69,
    Symbology.ITF: 70,
    Symbology.CODABAR: 71,
    Symbology.CODE93: 72,
    Symbology.CODE128: 73,
}


@dataclass(frozen=True)
class BarcodeOption:
    """
    Barcode print options.

    Attributes:
        width: Module width in dots (GS w, 2-6)
        height: Bar height in dots (GS h, 1-255)
        position: Human readable interpretation position (GS H)
        font: Human readable interpretation font (GS f)
        check_digit: Append the optional mod 43 check character (CODE39 only)
    """
    width: int = 3
    height: int = 162
    position: HriPosition = HriPosition.BELOW
    font: HriFont = HriFont.A
    check_digit: bool = False

    def commands(self) -> list[PrinterCommand]:
        """Build the option commands in printer order: height, width, HRI position, HRI font."""
        height = check_range("barcode height", self.height, 1, 255)
        width = check_range("barcode width", self.width, 2, 6)
        try:
            position = HriPosition(self.position)
            font = HriFont(self.font)
        except ValueError as e:
            raise InvalidOptionError(str(e)) from e
        return [
            PrinterCommand("barcode_height", GS + b"h", bytes([height])),
            PrinterCommand("barcode_width", GS + b"w", bytes([width])),
            PrinterCommand("hri_position", GS + b"H", bytes([position])),
            PrinterCommand("hri_font", GS + b"f", bytes([font])),
        ]


# ---- Check digits ----


def mod10_check_digit(digits: str) -> str:
    """
    Compute the GS1 mod 10 check digit (UPC-A, EAN-8, EAN-13).

    Weights alternate 3, 1, 3, ... starting from the rightmost payload digit,
    so the same routine serves every GS1 length.
    """
    total = 0
    for i, ch in enumerate(reversed(digits)):
        total += int(ch) * (3 if i % 2 == 0 else 1)
    return str((10 - total % 10) % 10)


def expand_upce(digits: str) -> str:
    """
    Expand a zero-suppressed UPC-E number to its 11 digit UPC-A form.

    Args:
        digits: Number system digit followed by the 6 digit UPC-E body

    Returns:
        The 11 UPC-A digits without check digit
    """
    ns, body = digits[0], digits[1:7]
    last = body[5]
    if last in "012":
        return ns + body[0:2] + last + "0000" + body[2:5]
    if last == "3":
        return ns + body[0:3] + "00000" + body[3:5]
    if last == "4":
        return ns + body[0:4] + "00000" + body[4]
    return ns + body[0:5] + "0000" + last


def upce_check_digit(digits: str) -> str:
    """Check digit of a UPC-E number (number system + 6 digit body)."""
    return mod10_check_digit(expand_upce(digits))


def code39_check_char(data: str) -> str:
    """Modulo 43 check character for CODE39 data (without start/stop)."""
    return CODE39_CHARS[sum(CODE39_CHARS.index(c) for c in data) % 43]


# ---- Per-symbology data rules ----


def _require_digits(symbology: Symbology, data: str) -> None:
    if not data or any(c not in DIGITS for c in data):
        raise InvalidOptionError(f"{symbology.value} data must contain digits only: {data!r}")


def _require_length(symbology: Symbology, data: str, allowed: tuple[int, ...]) -> None:
    if len(data) not in allowed:
        expected = " or ".join(str(n) for n in allowed)
        raise InvalidOptionError(
            f"{symbology.value} data must be {expected} digits long, got {len(data)}"
        )


def _gs1_data(symbology: Symbology, data: str, body_length: int) -> bytes:
    """Shared rule for UPC-A / EAN-8 / EAN-13: append or validate the check digit."""
    _require_digits(symbology, data)
    _require_length(symbology, data, (body_length, body_length + 1))
    expected = mod10_check_digit(data[:body_length])
    if len(data) == body_length:
        return (data + expected).encode("ascii")
    if data[-1] != expected:
        raise InvalidOptionError(
            f"{symbology.value} check digit mismatch: got {data[-1]}, expected {expected}"
        )
    return data.encode("ascii")


def _upca_data(data: str, option: BarcodeOption) -> bytes:
    return _gs1_data(Symbology.UPC_A, data, 11)


def _ean13_data(data: str, option: BarcodeOption) -> bytes:
    return _gs1_data(Symbology.EAN13, data, 12)


def _ean8_data(data: str, option: BarcodeOption) -> bytes:
    return _gs1_data(Symbology.EAN8, data, 7)


def _upce_data(data: str, option: BarcodeOption) -> bytes:
    symbology = Symbology.UPC_E
    _require_digits(symbology, data)
    _require_length(symbology, data, (6, 7, 8))
    if len(data) == 6:
        data = "0" + data
    elif data[0] != "0":
        raise InvalidOptionError(f"UPC-E number system must be 0, got {data[0]}")
    expected = upce_check_digit(data[:7])
    if len(data) == 8 and data[7] != expected:
        raise InvalidOptionError(
            f"UPC-E check digit mismatch: got {data[7]}, expected {expected}"
        )
    return (data[:7] + expected).encode("ascii")


def _itf_data(data: str, option: BarcodeOption) -> bytes:
    _require_digits(Symbology.ITF, data)
    if len(data) % 2 != 0 or len(data) > MAX_DATA_LENGTH - 1:
        raise InvalidOptionError(f"ITF data needs an even number of digits (2-254), got {len(data)}")
    return data.encode("ascii")


def _code39_data(data: str, option: BarcodeOption) -> bytes:
    body = data
    framed = len(data) >= 2 and data[0] == "*" and data[-1] == "*"
    if framed:
        body = data[1:-1]
    if not body:
        raise InvalidOptionError("CODE39 data must not be empty")
    invalid = sorted({c for c in body if c not in CODE39_CHARS})
    if invalid:
        raise InvalidOptionError(f"CODE39 data contains invalid characters: {invalid}")
    if option.check_digit:
        body += code39_check_char(body)
    encoded = f"*{body}*" if framed else body
    return encoded.encode("ascii")


def _codabar_data(data: str, option: BarcodeOption) -> bytes:
    if len(data) < 2 or data[0] not in CODABAR_START_STOP or data[-1] not in CODABAR_START_STOP:
        raise InvalidOptionError(
            f"CODABAR data must start and end with one of A, B, C, D: {data!r}"
        )
    invalid = sorted({c for c in data[1:-1] if c not in CODABAR_CHARS})
    if invalid:
        raise InvalidOptionError(f"CODABAR data contains invalid characters: {invalid}")
    return data.encode("ascii")


def _code93_data(data: str, option: BarcodeOption) -> bytes:
    if not data:
        raise InvalidOptionError("CODE93 data must not be empty")
    if any(ord(c) > 0x7F for c in data):
        raise InvalidOptionError(f"CODE93 data must be ASCII: {data!r}")
    return data.encode("ascii")


def _code128_char(code_set: str, ch: str) -> Optional[bytes]:
    """Bytes for one character in code set A or B, or None if the set lacks it."""
    value = ord(ch)
    if code_set == "A":
        return bytes([value]) if value < 0x60 else None
    if 0x20 <= value <= 0x7F:
        return CODE128_BRACE if ch == "{" else bytes([value])
    return None


def _code128_data(data: str, option: BarcodeOption) -> bytes:
    """
    Choose code sets A/B/C so the emitted byte string is as short as possible.

    Dynamic programming over (position, active code set). From each state a
    step may switch set (2 bytes), encode one character in A or B, encode a
    digit pair in C (1 byte), or shift a single character into the other of
    A/B (2 bytes + character). Ties keep the first candidate found in
    B, C, A order.
    """
    if not data:
        raise InvalidOptionError("CODE128 data must not be empty")
    if any(ord(c) > 0x7F for c in data):
        raise InvalidOptionError(f"CODE128 data must be ASCII: {data!r}")

    n = len(data)
    # best[i][code_set] = (cost, previous position, previous code set, chunk)
    best: list[dict] = [{} for _ in range(n + 1)]
    best[0][None] = (0, None, None, b"")

    def relax(pos, code_set, cost, prev_pos, prev_set, chunk):
        current = best[pos].get(code_set)
        if current is None or cost < current[0]:
            best[pos][code_set] = (cost, prev_pos, prev_set, chunk)

    for i in range(n):
        for active, (cost, _, _, _) in list(best[i].items()):
            for target in ("B", "C", "A"):
                prefix = b"" if target == active else CODE128_SELECT[target]
                if target == "C":
                    pair = data[i:i + 2]
                    if len(pair) == 2 and pair[0] in DIGITS and pair[1] in DIGITS:
                        chunk = prefix + bytes([int(pair)])
                        relax(i + 2, "C", cost + len(chunk), i, active, chunk)
                    continue
                encoded = _code128_char(target, data[i])
                if encoded is not None:
                    chunk = prefix + encoded
                    relax(i + 1, target, cost + len(chunk), i, active, chunk)
            if active in ("A", "B"):
                other = "B" if active == "A" else "A"
                encoded = _code128_char(other, data[i])
                if encoded is not None:
                    chunk = CODE128_SHIFT + encoded
                    relax(i + 1, active, cost + len(chunk), i, active, chunk)

    end_set = min(best[n], key=lambda s: best[n][s][0])
    chunks = []
    pos, code_set = n, end_set
    while pos > 0:
        _, prev_pos, prev_set, chunk = best[pos][code_set]
        chunks.append(chunk)
        pos, code_set = prev_pos, prev_set
    return b"".join(reversed(chunks))


_DATA_ENCODERS: dict[Symbology, Callable[[str, BarcodeOption], bytes]] = {
    Symbology.UPC_A: _upca_data,
    Symbology.UPC_E: _upce_data,
    Symbology.EAN13: _ean13_data,
    Symbology.EAN8: _ean8_data,
    Symbology.CODE39: _code39_data,
    Symbology.ITF: _itf_data,
    Symbology.CODABAR: _codabar_data,
    Symbology.CODE93: _code93_data,
    Symbology.CODE128: _code128_data,
}


def encode_data(symbology: Symbology, data: str) -> bytes:
    """Validate data and return the d1...dn bytes the printer receives (check digits included)."""
    return _DATA_ENCODERS[Symbology.from_name(symbology)](data, BarcodeOption())


def build_commands(
    symbology: Symbology,
    data: str,
    option: Optional[BarcodeOption] = None,
) -> list[PrinterCommand]:
    """
    Build the complete command sequence for one barcode.

    Args:
        symbology: Barcode system
        data: Barcode content (check digit optional where the symbology has one)
        option: Print options (defaults to BarcodeOption())

    Returns:
        Option commands followed by the GS k command

    Raises:
        InvalidOptionError: If data or options are invalid for the symbology
    """
    option = option or BarcodeOption()
    symbology = Symbology.from_name(symbology)
    if not isinstance(data, str):
        raise InvalidOptionError(f"Barcode data must be a string, got {type(data).__name__}")
    if option.check_digit and symbology is not Symbology.CODE39:
        raise InvalidOptionError(f"Optional check digit is not available for {symbology.value}")

    commands = option.commands()
    payload = _DATA_ENCODERS[symbology](data, option)
    if len(payload) > MAX_DATA_LENGTH:
        raise InvalidOptionError(
            f"{symbology.value} data is {len(payload)} bytes, maximum is {MAX_DATA_LENGTH}"
        )
    commands.append(
        PrinterCommand(
            f"barcode_{symbology.name.lower()}",
            GS + b"k",
            bytes([symbology.system, len(payload)]) + payload,
        )
    )
    return commands


def encode(symbology: Symbology, data: str, option: Optional[BarcodeOption] = None) -> bytes:
    """Encode a barcode to the ESC/POS byte string (options + GS k)."""
    return b"".join(cmd.encode() for cmd in build_commands(symbology, data, option))
