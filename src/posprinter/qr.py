"""
QR Code Encoder.

Builds a model 2 QR symbol as a square boolean matrix:

    1. Pick the most compact mode (numeric < alphanumeric < byte)
    2. Pick the smallest version whose capacity fits (or check a fixed one)
    3. Pack mode indicator, character count, data, terminator and padding
    4. Add Reed-Solomon error correction and interleave the blocks
    5. Draw function patterns and place codewords in zig-zag order
    6. Score the 8 masks with the 4 penalty rules and keep the lowest

The matrix is printed either through the printer's own QR command
(GS ( k, see native_commands) or as a raster image (see image.py).

Reference: ISO/IEC 18004:2015
"""

import itertools
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import lru_cache
from typing import Optional, Union

from .errors import EncodingTooLargeError, InvalidOptionError, UnsupportedError
from .protocol import GS, PrinterCommand, check_range, u16le

MIN_VERSION = 1
MAX_VERSION = 40

ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"

PAD_CODEWORDS = (0xEC, 0x11)

# Penalty weights for the mask evaluation rules
PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10

FINDER_LIKE_PATTERNS = ("10111010000", "00001011101")


class QRErrorCorrection(IntEnum):
    """Error correction levels, ordered from lowest to highest redundancy."""
    L = 0  # ~7% recovery
    M = 1  # ~15% recovery
    Q = 2  # ~25% recovery
    H = 3  # ~30% recovery

    @property
    def format_bits(self) -> int:
        """2-bit level indicator used in the format information."""
        return (1, 0, 3, 2)[self]


class QRMode(Enum):
    """Data encoding modes with their 4-bit mode indicator."""
    NUMERIC = 0b0001
    ALPHANUMERIC = 0b0010
    BYTE = 0b0100

    def char_count_bits(self, version: int) -> int:
        """Width of the character count field for a version."""
        group = 0 if version <= 9 else 1 if version <= 26 else 2
        return _CHAR_COUNT_BITS[self][group]


_CHAR_COUNT_BITS = {
    QRMode.NUMERIC: (10, 12, 14),
    QRMode.ALPHANUMERIC: (9, 11, 13),
    QRMode.BYTE: (8, 16, 16),
}

# Error correction codewords per block, indexed by version (index 0 unused)
_ECC_CODEWORDS_PER_BLOCK = {
    QRErrorCorrection.L: (None, 7, 10, 15, 20, 26, 18, 20, 24, 30, 18, 20, 24, 26, 30, 22, 24, 28, 30, 28, 28,
                          28, 28, 30, 30, 26, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    QRErrorCorrection.M: (None, 10, 16, 26, 18, 24, 16, 18, 22, 22, 26, 30, 22, 22, 24, 24, 28, 28, 26, 26, 26,
                          26, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28),
    QRErrorCorrection.Q: (None, 13, 22, 18, 26, 18, 24, 18, 22, 20, 24, 28, 26, 24, 20, 30, 24, 28, 28, 26, 30,
                          28, 30, 30, 30, 30, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    QRErrorCorrection.H: (None, 17, 28, 22, 16, 22, 28, 26, 26, 24, 28, 24, 28, 22, 24, 24, 30, 28, 28, 26, 28,
                          30, 24, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
}

# Number of error correction blocks, indexed by version (index 0 unused)
_NUM_ERROR_CORRECTION_BLOCKS = {
    QRErrorCorrection.L: (None, 1, 1, 1, 1, 1, 2, 2, 2, 2, 4, 4, 4, 4, 4, 6, 6, 6, 6, 7, 8,
                          8, 9, 9, 10, 12, 12, 12, 13, 14, 15, 16, 17, 18, 19, 19, 20, 21, 22, 24, 25),
    QRErrorCorrection.M: (None, 1, 1, 1, 2, 2, 4, 4, 4, 5, 5, 5, 8, 9, 9, 10, 10, 11, 13, 14, 16,
                          17, 17, 18, 20, 21, 23, 25, 26, 28, 29, 31, 33, 35, 37, 38, 40, 43, 45, 47, 49),
    QRErrorCorrection.Q: (None, 1, 1, 2, 2, 4, 4, 6, 6, 8, 8, 8, 10, 12, 16, 12, 17, 16, 18, 21, 20,
                          23, 23, 25, 27, 29, 34, 34, 35, 38, 40, 43, 45, 48, 51, 53, 56, 59, 62, 65, 68),
    QRErrorCorrection.H: (None, 1, 1, 2, 4, 4, 4, 5, 6, 8, 8, 11, 11, 16, 16, 18, 16, 19, 21, 25, 25,
                          25, 34, 30, 32, 35, 37, 40, 42, 45, 48, 51, 54, 57, 60, 63, 66, 70, 74, 77, 81),
}

# Mask conditions; x is the column, y the row. A true condition inverts the module.
_MASK_PATTERNS = (
    lambda x, y: (x + y) % 2 == 0,
    lambda x, y: y % 2 == 0,
    lambda x, y: x % 3 == 0,
    lambda x, y: (x + y) % 3 == 0,
    lambda x, y: (x // 3 + y // 2) % 2 == 0,
    lambda x, y: x * y % 2 + x * y % 3 == 0,
    lambda x, y: (x * y % 2 + x * y % 3) % 2 == 0,
    lambda x, y: ((x + y) % 2 + x * y % 3) % 2 == 0,
)


@dataclass(frozen=True)
class QRMatrix:
    """
    An encoded QR symbol.

    Attributes:
        version: Symbol version (1-40)
        error_correction: Error correction level
        mode: Data encoding mode
        mask: Selected mask pattern (0-7)
        modules: Rows of modules, True is dark
    """
    version: int
    error_correction: QRErrorCorrection
    mode: QRMode
    mask: int
    modules: tuple[tuple[bool, ...], ...]

    @property
    def size(self) -> int:
        """Modules per side (17 + 4 * version)."""
        return len(self.modules)

    def is_dark(self, x: int, y: int) -> bool:
        """Module at column x, row y."""
        return self.modules[y][x]


# ---- Capacity ----


def symbol_size(version: int) -> int:
    """Modules per side for a version."""
    return version * 4 + 17


def _num_raw_data_modules(version: int) -> int:
    """Modules available for data and EC codewords (and remainder bits)."""
    result = (16 * version + 128) * version + 64
    if version >= 2:
        num_align = version // 7 + 2
        result -= (25 * num_align - 10) * num_align - 55
        if version >= 7:
            result -= 36
    return result


def num_data_codewords(version: int, error_correction: QRErrorCorrection) -> int:
    """Data codewords (excluding EC codewords) a version holds at an EC level."""
    ecl = QRErrorCorrection(error_correction)
    return (
        _num_raw_data_modules(version) // 8
        - _ECC_CODEWORDS_PER_BLOCK[ecl][version] * _NUM_ERROR_CORRECTION_BLOCKS[ecl][version]
    )


def alignment_positions(version: int) -> list[int]:
    """Row/column centers of the alignment patterns, ascending."""
    if version == 1:
        return []
    num_align = version // 7 + 2
    step = (version * 8 + num_align * 3 + 5) // (num_align * 4 - 4) * 2
    size = symbol_size(version)
    positions = [size - 7 - i * step for i in range(num_align - 1)] + [6]
    return sorted(positions)


# ---- Data encoding ----


def select_mode(data: bytes) -> QRMode:
    """Most compact mode that represents every byte of data."""
    if all(0x30 <= b <= 0x39 for b in data):
        return QRMode.NUMERIC
    if all(chr(b) in ALPHANUMERIC_CHARSET for b in data):
        return QRMode.ALPHANUMERIC
    return QRMode.BYTE


def _payload_bit_length(mode: QRMode, count: int) -> int:
    if mode is QRMode.NUMERIC:
        return 10 * (count // 3) + (0, 4, 7)[count % 3]
    if mode is QRMode.ALPHANUMERIC:
        return 11 * (count // 2) + 6 * (count % 2)
    return 8 * count


def encoded_bit_length(data: bytes, mode: QRMode, version: int) -> int:
    """Bits needed for mode indicator, character count and payload at a version."""
    return 4 + mode.char_count_bits(version) + _payload_bit_length(mode, len(data))


def _fits(data: bytes, mode: QRMode, version: int, error_correction: QRErrorCorrection) -> bool:
    if len(data) >= 1 << mode.char_count_bits(version):
        return False
    capacity = num_data_codewords(version, error_correction) * 8
    return encoded_bit_length(data, mode, version) <= capacity


def select_version(
    data: bytes,
    mode: QRMode,
    error_correction: QRErrorCorrection,
    version: Optional[int] = None,
) -> int:
    """
    Choose the symbol version.

    Args:
        data: Data bytes
        mode: Encoding mode
        error_correction: EC level
        version: Fixed version, or None to pick the smallest that fits

    Raises:
        EncodingTooLargeError: If the data does not fit
    """
    if version is not None:
        if not _fits(data, mode, version, error_correction):
            raise EncodingTooLargeError(
                f"{len(data)} bytes in {mode.name} mode do not fit QR version {version}"
                f" at EC level {error_correction.name}"
            )
        return version

    for candidate in range(MIN_VERSION, MAX_VERSION + 1):
        if _fits(data, mode, candidate, error_correction):
            return candidate
    raise EncodingTooLargeError(
        f"{len(data)} bytes in {mode.name} mode exceed the capacity of QR version {MAX_VERSION}"
        f" at EC level {error_correction.name}"
    )


class _BitBuffer(list):
    """Sequence of bits, most significant first."""

    def append_bits(self, value: int, length: int):
        for i in reversed(range(length)):
            self.append((value >> i) & 1)

    def to_codewords(self) -> list[int]:
        return [
            int("".join(str(bit) for bit in self[i:i + 8]), 2)
            for i in range(0, len(self), 8)
        ]


def make_data_codewords(
    data: bytes,
    mode: QRMode,
    version: int,
    error_correction: QRErrorCorrection,
) -> list[int]:
    """Pack one segment into the version's data codewords, with terminator and padding."""
    bits = _BitBuffer()
    bits.append_bits(mode.value, 4)
    bits.append_bits(len(data), mode.char_count_bits(version))

    if mode is QRMode.NUMERIC:
        digits = data.decode("ascii")
        for i in range(0, len(digits), 3):
            group = digits[i:i + 3]
            bits.append_bits(int(group), len(group) * 3 + 1)
    elif mode is QRMode.ALPHANUMERIC:
        chars = data.decode("ascii")
        for i in range(0, len(chars) - 1, 2):
            value = ALPHANUMERIC_CHARSET.index(chars[i]) * 45 + ALPHANUMERIC_CHARSET.index(chars[i + 1])
            bits.append_bits(value, 11)
        if len(chars) % 2:
            bits.append_bits(ALPHANUMERIC_CHARSET.index(chars[-1]), 6)
    else:
        for b in data:
            bits.append_bits(b, 8)

    capacity = num_data_codewords(version, error_correction) * 8
    bits.append_bits(0, min(4, capacity - len(bits)))
    bits.append_bits(0, -len(bits) % 8)

    codewords = bits.to_codewords()
    for pad in itertools.cycle(PAD_CODEWORDS):
        if len(codewords) >= capacity // 8:
            break
        codewords.append(pad)
    return codewords


# ---- Reed-Solomon over GF(2^8), primitive polynomial x^8 + x^4 + x^3 + x^2 + 1 ----

_GF_EXP = [0] * 512
_GF_LOG = [0] * 256


def _init_galois_tables():
    value = 1
    for exponent in range(255):
        _GF_EXP[exponent] = value
        _GF_LOG[value] = exponent
        value <<= 1
        if value & 0x100:
            value ^= 0x11D
    for exponent in range(255, 512):
        _GF_EXP[exponent] = _GF_EXP[exponent - 255]


_init_galois_tables()


def _gf_multiply(a: int, b: int) -> int:
    if a == 0 or b == 0:
        return 0
    return _GF_EXP[_GF_LOG[a] + _GF_LOG[b]]


@lru_cache(maxsize=None)
def _rs_generator(degree: int) -> tuple[int, ...]:
    """Generator polynomial (x - a^0)(x - a^1)...(x - a^(degree-1)), highest term first."""
    poly = [1]
    for i in range(degree):
        factor = (1, _GF_EXP[i])
        product = [0] * (len(poly) + 1)
        for j, coef in enumerate(poly):
            for k, term in enumerate(factor):
                product[j + k] ^= _gf_multiply(coef, term)
        poly = product
    return tuple(poly)


def reed_solomon_remainder(data: list[int], degree: int) -> list[int]:
    """EC codewords: remainder of data(x) * x^degree divided by the generator."""
    generator = _rs_generator(degree)
    message = list(data) + [0] * degree
    for i in range(len(data)):
        coef = message[i]
        if coef:
            for j in range(1, len(generator)):
                message[i + j] ^= _gf_multiply(generator[j], coef)
    return message[len(data):]


def add_error_correction(
    data: list[int],
    version: int,
    error_correction: QRErrorCorrection,
) -> list[int]:
    """
    Split data codewords into blocks, append EC codewords, and interleave.

    Short blocks come first; long blocks carry one more data codeword.
    Output is data column-wise across blocks, then EC column-wise.
    """
    num_blocks = _NUM_ERROR_CORRECTION_BLOCKS[error_correction][version]
    ecc_length = _ECC_CODEWORDS_PER_BLOCK[error_correction][version]
    raw_codewords = _num_raw_data_modules(version) // 8
    num_short = num_blocks - raw_codewords % num_blocks
    short_length = raw_codewords // num_blocks - ecc_length

    blocks = []
    ecc_blocks = []
    offset = 0
    for i in range(num_blocks):
        length = short_length + (0 if i < num_short else 1)
        block = data[offset:offset + length]
        offset += length
        blocks.append(block)
        ecc_blocks.append(reed_solomon_remainder(block, ecc_length))

    result = []
    for i in range(short_length + 1):
        for block in blocks:
            if i < len(block):
                result.append(block[i])
    for i in range(ecc_length):
        for ecc in ecc_blocks:
            result.append(ecc[i])
    return result


# ---- Module placement ----


def _format_cells(size: int) -> list[tuple[int, int, int]]:
    """(bit index, x, y) for both copies of the 15 format bits."""
    cells = [(i, 8, i) for i in range(6)]
    cells += [(6, 8, 7), (7, 8, 8), (8, 7, 8)]
    cells += [(i, 14 - i, 8) for i in range(9, 15)]
    cells += [(i, size - 1 - i, 8) for i in range(8)]
    cells += [(i, 8, size - 15 + i) for i in range(8, 15)]
    return cells


def format_bits(error_correction: QRErrorCorrection, mask: int) -> int:
    """15-bit format information: EC level + mask, BCH(15,5) protected and XOR-masked."""
    data = error_correction.format_bits << 3 | mask
    rem = data
    for _ in range(10):
        rem = (rem << 1) ^ ((rem >> 9) * 0x537)
    return (data << 10 | rem) ^ 0x5412


def version_bits(version: int) -> int:
    """18-bit version information, BCH(18,6) protected."""
    rem = version
    for _ in range(12):
        rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
    return version << 12 | rem


class _Symbol:
    """Mutable module grid used while building a QR symbol."""

    def __init__(self, version: int):
        self.version = version
        self.size = symbol_size(version)
        self.modules = [[False] * self.size for _ in range(self.size)]
        self.function = [[False] * self.size for _ in range(self.size)]

    def _set_function(self, x: int, y: int, dark: bool):
        self.modules[y][x] = dark
        self.function[y][x] = True

    def draw_function_patterns(self):
        size = self.size

        # Timing patterns
        for i in range(size):
            self._set_function(6, i, i % 2 == 0)
            self._set_function(i, 6, i % 2 == 0)

        # Finder patterns with their separators
        for cx, cy in ((3, 3), (size - 4, 3), (3, size - 4)):
            for dy in range(-4, 5):
                for dx in range(-4, 5):
                    x, y = cx + dx, cy + dy
                    if 0 <= x < size and 0 <= y < size:
                        self._set_function(x, y, max(abs(dx), abs(dy)) not in (2, 4))

        # Alignment patterns, except where they would overlap a finder
        positions = alignment_positions(self.version)
        last = len(positions) - 1
        for i, cx in enumerate(positions):
            for j, cy in enumerate(positions):
                if (i, j) in ((0, 0), (0, last), (last, 0)):
                    continue
                for dy in range(-2, 3):
                    for dx in range(-2, 3):
                        self._set_function(cx + dx, cy + dy, max(abs(dx), abs(dy)) != 1)

        # Reserve format information; real bits are written per mask
        for _, x, y in _format_cells(size):
            self._set_function(x, y, False)
        self._set_function(8, size - 8, True)

        if self.version >= 7:
            bits = version_bits(self.version)
            for i in range(18):
                dark = (bits >> i) & 1 == 1
                a, b = size - 11 + i % 3, i // 3
                self._set_function(a, b, dark)
                self._set_function(b, a, dark)

    def draw_codewords(self, codewords: list[int]):
        """Place codeword bits in the two-column zig-zag, skipping function modules."""
        size = self.size
        total_bits = len(codewords) * 8
        i = 0
        for right in range(size - 1, 0, -2):
            if right <= 6:
                right -= 1  # skip the vertical timing column
            upward = (right + 1) & 2 == 0
            for vert in range(size):
                y = size - 1 - vert if upward else vert
                for x in (right, right - 1):
                    if not self.function[y][x] and i < total_bits:
                        self.modules[y][x] = (codewords[i >> 3] >> (7 - (i & 7))) & 1 == 1
                        i += 1

    def masked(self, mask: int, error_correction: QRErrorCorrection) -> list[list[bool]]:
        """Copy of the grid with a mask applied and its format information drawn."""
        condition = _MASK_PATTERNS[mask]
        grid = [
            [
                module != (not self.function[y][x] and condition(x, y))
                for x, module in enumerate(row)
            ]
            for y, row in enumerate(self.modules)
        ]
        bits = format_bits(error_correction, mask)
        for i, x, y in _format_cells(self.size):
            grid[y][x] = (bits >> i) & 1 == 1
        return grid


# ---- Mask evaluation ----


def _line_penalty(line: list[bool]) -> int:
    """Rule 1 (runs of five or more) and rule 3 (finder-like patterns) for one row or column."""
    score = 0
    run_length = 1
    for previous, current in zip(line, line[1:]):
        if current == previous:
            run_length += 1
        else:
            if run_length >= 5:
                score += PENALTY_N1 + run_length - 5
            run_length = 1
    if run_length >= 5:
        score += PENALTY_N1 + run_length - 5

    text = "".join("1" if m else "0" for m in line)
    for pattern in FINDER_LIKE_PATTERNS:
        start = text.find(pattern)
        while start != -1:
            score += PENALTY_N3
            start = text.find(pattern, start + 1)
    return score


def penalty_score(grid: list[list[bool]]) -> int:
    """Total penalty of a masked symbol; lower is better."""
    size = len(grid)
    score = 0

    for row in grid:
        score += _line_penalty(row)
    for column in zip(*grid):
        score += _line_penalty(list(column))

    # Rule 2: 2x2 blocks of one color
    for y in range(size - 1):
        for x in range(size - 1):
            color = grid[y][x]
            if color == grid[y][x + 1] == grid[y + 1][x] == grid[y + 1][x + 1]:
                score += PENALTY_N2

    # Rule 4: each full 5% deviation of dark modules from 50%
    dark = sum(sum(row) for row in grid)
    total = size * size
    score += abs(dark * 100 - total * 50) // (total * 5) * PENALTY_N4
    return score


# ---- Public API ----


def _as_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    raise InvalidOptionError(f"QR data must be str or bytes, got {type(data).__name__}")


def encode(
    data: Union[str, bytes],
    error_correction: QRErrorCorrection = QRErrorCorrection.M,
    version: Optional[int] = None,
    mask: Optional[int] = None,
) -> QRMatrix:
    """
    Encode data as a QR code matrix.

    Args:
        data: Text (encoded as UTF-8) or raw bytes
        error_correction: EC level (L, M, Q, H)
        version: Fixed version 1-40, or None for the smallest that fits
        mask: Force a mask pattern 0-7 instead of choosing by penalty

    Returns:
        QRMatrix with the selected version, mode and mask

    Raises:
        EncodingTooLargeError: If the data does not fit
        InvalidOptionError: If version or mask is out of range
    """
    payload = _as_bytes(data)
    try:
        ecl = QRErrorCorrection(error_correction)
    except ValueError as e:
        raise InvalidOptionError(f"Invalid QR error correction level: {error_correction!r}") from e
    if version is not None:
        check_range("QR version", version, MIN_VERSION, MAX_VERSION)
    if mask is not None:
        check_range("QR mask", mask, 0, 7)

    mode = select_mode(payload)
    version = select_version(payload, mode, ecl, version)
    codewords = add_error_correction(make_data_codewords(payload, mode, version, ecl), version, ecl)

    symbol = _Symbol(version)
    symbol.draw_function_patterns()
    symbol.draw_codewords(codewords)

    candidates = range(8) if mask is None else (mask,)
    best_mask, best_grid, best_score = None, None, None
    for candidate in candidates:
        grid = symbol.masked(candidate, ecl)
        score = penalty_score(grid)
        if best_score is None or score < best_score:
            best_mask, best_grid, best_score = candidate, grid, score

    return QRMatrix(
        version=version,
        error_correction=ecl,
        mode=mode,
        mask=best_mask,
        modules=tuple(tuple(row) for row in best_grid),
    )


# ---- Native printer command (GS ( k) ----


class QRCodeModel(IntEnum):
    """QR symbol model (GS ( k function 165)."""
    MODEL1 = 49
    MODEL2 = 50
    MICRO = 51


MAX_MODULE_SIZE = 16
MAX_NATIVE_DATA = 7089


@dataclass(frozen=True)
class QRCodeOption:
    """
    QR code print options.

    Attributes:
        size: Module size in dots (1-16)
        correction_level: Error correction level
        model: Symbol model for the native command
        version: Fixed version, or None for auto. Only a raster image can
            honour a fixed version
        native: Force the native command (True) or raster image (False);
            None uses the printer profile's default
    """
    size: int = 4
    correction_level: QRErrorCorrection = QRErrorCorrection.M
    model: QRCodeModel = QRCodeModel.MODEL2
    version: Optional[int] = None
    native: Optional[bool] = None


def _qr_function(fn: int, params: bytes) -> bytes:
    """GS ( k pL pH cn fn params with cn = 49 (QR code)."""
    return u16le(len(params) + 2) + bytes([49, fn]) + params


def native_commands(data: Union[str, bytes], option: QRCodeOption) -> list[PrinterCommand]:
    """
    Build the GS ( k sequence: model, module size, EC level, store data, print.

    The symbol is encoded locally first so data that cannot fit raises
    before any command is produced.

    Raises:
        EncodingTooLargeError: If the data does not fit
        InvalidOptionError: If an option is out of range
        UnsupportedError: If a fixed version is requested, GS ( k has no
            version parameter
    """
    if option.version is not None:
        raise UnsupportedError("The native QR command cannot fix the symbol version")
    payload = _as_bytes(data)
    size = check_range("QR module size", option.size, 1, MAX_MODULE_SIZE)
    try:
        model = QRCodeModel(option.model)
        ecl = QRErrorCorrection(option.correction_level)
    except ValueError as e:
        raise InvalidOptionError(str(e)) from e
    select_version(payload, select_mode(payload), ecl)
    if len(payload) > MAX_NATIVE_DATA:
        raise EncodingTooLargeError(f"QR data is {len(payload)} bytes, maximum is {MAX_NATIVE_DATA}")

    prefix = GS + b"(k"
    return [
        PrinterCommand("qr_model", prefix, _qr_function(65, bytes([model, 0]))),
        PrinterCommand("qr_size", prefix, _qr_function(67, bytes([size]))),
        PrinterCommand("qr_correction_level", prefix, _qr_function(69, bytes([48 + ecl]))),
        PrinterCommand("qr_store", prefix, _qr_function(80, b"\x30" + payload)),
        PrinterCommand("qr_print", prefix, _qr_function(81, b"\x30")),
    ]
