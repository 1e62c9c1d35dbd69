"""
ESC/POS Command Builder.

Accumulates printer commands in call order and tracks the text style the
printer is in, so style setters only emit bytes when the style changes.

Every method validates its arguments and builds its commands before
touching the buffer: a rejected call appends nothing and leaves the
tracked state unchanged.

Reference: Epson ESC/POS Command Reference
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from PIL import Image

from . import barcodes, image, qr
from .barcodes import BarcodeOption, Symbology
from .errors import InvalidOptionError
from .protocol import (
    ESC,
    GS,
    LF,
    NUL,
    CashDrawerPin,
    Font,
    JustifyMode,
    PageCode,
    PrinterCommand,
    UnderlineMode,
    check_range,
)
from .qr import QRCodeOption


@dataclass(frozen=True)
class PrintState:
    """Text style currently active on the printer."""
    justify: JustifyMode = JustifyMode.LEFT
    font: Font = Font.A
    bold: bool = False
    underline: UnderlineMode = UnderlineMode.NONE
    double_strike: bool = False
    reverse: bool = False
    upside_down: bool = False
    flip: bool = False
    smoothing: bool = False
    size: tuple[int, int] = (1, 1)
    line_spacing: Optional[int] = None  # None = printer default
    page_code: PageCode = PageCode.PC437


def _enum(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        raise InvalidOptionError(f"Invalid {name}: {value!r}") from e


class CommandBuilder:
    """
    ESC/POS command builder.

    Mutating methods return self so calls can be chained:

        builder.init().justify(JustifyMode.CENTER).bold(True).writeln("TOTAL")
    """

    def __init__(self):
        self._commands: list[PrinterCommand] = []
        self.state = PrintState()

    def __len__(self) -> int:
        return sum(len(cmd) for cmd in self._commands)

    @property
    def commands(self) -> list[PrinterCommand]:
        """Buffered commands in emission order."""
        return list(self._commands)

    def clear(self):
        """Drop all buffered commands. The tracked state is kept."""
        self._commands.clear()

    def get_commands(self) -> bytes:
        """Get all commands as a single byte string."""
        return b"".join(cmd.encode() for cmd in self._commands)

    def _add(self, commands: list[PrinterCommand], **changes) -> "CommandBuilder":
        """Append prebuilt commands and apply the state changes they cause."""
        self._commands.extend(commands)
        if changes:
            self.state = replace(self.state, **changes)
        return self

    def _set(self, field: str, value, command: PrinterCommand) -> "CommandBuilder":
        """Emit a style command only when the tracked value differs."""
        if getattr(self.state, field) == value:
            return self
        return self._add([command], **{field: value})

    # ---- Printer control ----

    def init(self) -> "CommandBuilder":
        """Initialize printer (ESC @) and reset the tracked style."""
        self._commands.append(PrinterCommand("init", ESC + b"@"))
        self.state = PrintState()
        return self

    def reset(self) -> "CommandBuilder":
        """Hardware reset (ESC ? LF NUL) and reset the tracked style."""
        self._commands.append(PrinterCommand("reset", ESC + b"?", LF + NUL))
        self.state = PrintState()
        return self

    def raw(self, data: bytes) -> "CommandBuilder":
        """Append bytes verbatim. The tracked style is not updated."""
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidOptionError(f"Raw data must be bytes, got {type(data).__name__}")
        return self._add([PrinterCommand("raw", b"", bytes(data))])

    # ---- Text style ----

    def justify(self, mode: JustifyMode) -> "CommandBuilder":
        """Set justification (ESC a n)."""
        mode = _enum(JustifyMode, mode, "justification")
        return self._set("justify", mode, PrinterCommand("justify", ESC + b"a", bytes([mode])))

    def font(self, font: Font) -> "CommandBuilder":
        """Select character font (ESC M n)."""
        font = _enum(Font, font, "font")
        return self._set("font", font, PrinterCommand("font", ESC + b"M", bytes([font])))

    def bold(self, on: bool = True) -> "CommandBuilder":
        """Turn emphasized mode on or off (ESC E n)."""
        on = bool(on)
        return self._set("bold", on, PrinterCommand("bold", ESC + b"E", bytes([on])))

    def underline(self, mode: UnderlineMode = UnderlineMode.SINGLE) -> "CommandBuilder":
        """Set underline mode (ESC - n)."""
        mode = _enum(UnderlineMode, mode, "underline mode")
        return self._set("underline", mode, PrinterCommand("underline", ESC + b"-", bytes([mode])))

    def double_strike(self, on: bool = True) -> "CommandBuilder":
        """Turn double-strike mode on or off (ESC G n)."""
        on = bool(on)
        return self._set("double_strike", on, PrinterCommand("double_strike", ESC + b"G", bytes([on])))

    def reverse(self, on: bool = True) -> "CommandBuilder":
        """Turn white/black reverse printing on or off (GS B n)."""
        on = bool(on)
        return self._set("reverse", on, PrinterCommand("reverse", GS + b"B", bytes([on])))

    def upside_down(self, on: bool = True) -> "CommandBuilder":
        """Turn upside-down printing on or off (ESC { n)."""
        on = bool(on)
        return self._set("upside_down", on, PrinterCommand("upside_down", ESC + b"{", bytes([on])))

    def flip(self, on: bool = True) -> "CommandBuilder":
        """Turn 90 degree clockwise rotation on or off (ESC V n)."""
        on = bool(on)
        return self._set("flip", on, PrinterCommand("flip", ESC + b"V", bytes([on])))

    def smoothing(self, on: bool = True) -> "CommandBuilder":
        """Turn smoothing on or off (GS b n)."""
        on = bool(on)
        return self._set("smoothing", on, PrinterCommand("smoothing", GS + b"b", bytes([on])))

    def size(self, width: int = 1, height: int = 1) -> "CommandBuilder":
        """
        Set character size multipliers (GS ! n).

        Args:
            width: Horizontal magnification (1-8)
            height: Vertical magnification (1-8)
        """
        width = check_range("character width", width, 1, 8)
        height = check_range("character height", height, 1, 8)
        n = (width - 1) << 4 | (height - 1)
        return self._set("size", (width, height), PrinterCommand("size", GS + b"!", bytes([n])))

    def reset_size(self) -> "CommandBuilder":
        """Return to normal character size."""
        return self.size(1, 1)

    def line_spacing(self, dots: int) -> "CommandBuilder":
        """Set line spacing in motion units (ESC 3 n)."""
        dots = check_range("line spacing", dots)
        return self._set("line_spacing", dots, PrinterCommand("line_spacing", ESC + b"3", bytes([dots])))

    def reset_line_spacing(self) -> "CommandBuilder":
        """Select the printer's default line spacing (ESC 2)."""
        return self._set("line_spacing", None, PrinterCommand("reset_line_spacing", ESC + b"2"))

    def page_code(self, code: PageCode) -> "CommandBuilder":
        """Select character code table (ESC t n)."""
        code = _enum(PageCode, code, "page code")
        return self._set("page_code", code, PrinterCommand("page_code", ESC + b"t", bytes([code])))

    # ---- Text ----

    def write(self, text: str) -> "CommandBuilder":
        """Print text encoded with the active page code."""
        if not isinstance(text, str):
            raise InvalidOptionError(f"Text must be a string, got {type(text).__name__}")
        data = self.state.page_code.encode(text)
        if not data:
            return self
        return self._add([PrinterCommand("text", b"", data)])

    def writeln(self, text: str = "") -> "CommandBuilder":
        """Print text followed by a line feed."""
        if not isinstance(text, str):
            raise InvalidOptionError(f"Text must be a string, got {type(text).__name__}")
        data = self.state.page_code.encode(text)
        return self._add([PrinterCommand("text", b"", data + LF)])

    # ---- Paper handling ----

    def feed(self, lines: int = 1) -> "CommandBuilder":
        """Print buffer and feed n lines (ESC d n)."""
        lines = check_range("feed lines", lines)
        return self._add([PrinterCommand("feed", ESC + b"d", bytes([lines]))])

    def cut(self, partial: bool = False, feed: int = 0) -> "CommandBuilder":
        """
        Feed paper and cut (GS V m n, function B).

        Args:
            partial: Partial cut (one point left uncut) instead of full cut
            feed: Extra feed in motion units before cutting
        """
        feed = check_range("cut feed", feed)
        mode = b"B" if partial else b"A"
        return self._add([PrinterCommand("cut", GS + b"V", mode + bytes([feed]))])

    def cash_drawer(
        self,
        pin: CashDrawerPin = CashDrawerPin.PIN2,
        on_time: int = 25,
        off_time: int = 250,
    ) -> "CommandBuilder":
        """
        Generate a drawer kick-out pulse (ESC p m t1 t2).

        Args:
            pin: Connector pin (2 or 5)
            on_time: Pulse on time in units of 2 ms
            off_time: Pulse off time in units of 2 ms
        """
        pin = _enum(CashDrawerPin, pin, "cash drawer pin")
        on_time = check_range("cash drawer on time", on_time)
        off_time = check_range("cash drawer off time", off_time)
        return self._add([
            PrinterCommand("cash_drawer", ESC + b"p", bytes([pin, on_time, off_time]))
        ])

    def motion_units(self, x: int, y: int) -> "CommandBuilder":
        """Set horizontal and vertical motion units (GS P x y)."""
        x = check_range("horizontal motion unit", x)
        y = check_range("vertical motion unit", y)
        return self._add([PrinterCommand("motion_units", GS + b"P", bytes([x, y]))])

    # ---- Symbols and graphics ----

    def barcode(
        self,
        symbology: Symbology,
        data: str,
        option: Optional[BarcodeOption] = None,
    ) -> "CommandBuilder":
        """Print a barcode with the printer's native GS k command."""
        return self._add(barcodes.build_commands(symbology, data, option))

    def qrcode_native(
        self,
        data: Union[str, bytes],
        option: Optional[QRCodeOption] = None,
    ) -> "CommandBuilder":
        """Print a QR code with the printer's native GS ( k commands."""
        return self._add(qr.native_commands(data, option or QRCodeOption()))

    def raster(self, img: Image.Image, max_width: Optional[int] = None) -> "CommandBuilder":
        """Print a 1-bit image as a GS v 0 raster bit image."""
        return self._add([image.raster_command(img, max_width)])
