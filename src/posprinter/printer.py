"""
High-Level ESC/POS Printer Interface.

Buffers commands from a chainable API and writes them to a sink on flush():

    with Printer(NetworkSink("192.168.1.50")) as printer:
        printer.init().justify(JustifyMode.CENTER).bold().writeln("RECEIPT")
        printer.ean13("400638133393").qrcode("https://example.com").print_cut()

Every call validates first: a rejected call raises and leaves the buffer
and the tracked text style exactly as they were.
"""

import logging
import time
from enum import Enum
from typing import Optional, Union

from PIL import Image

from . import qr
from .barcodes import BarcodeOption, Symbology
from .commands import CommandBuilder, PrintState
from .connection import Sink
from .errors import (
    InvalidOptionError,
    PrinterClosedError,
    PrinterIOError,
    UnsupportedError,
)
from .image import matrix_to_image
from .profiles import PrinterProfile, get_profile
from .protocol import CashDrawerPin, Font, JustifyMode, PageCode, PrinterCommand, UnderlineMode
from .qr import QRCodeModel, QRCodeOption

logger = logging.getLogger(__name__)


class DebugMode(Enum):
    """Format of the command dump logged on flush."""
    HEX = "hex"
    DEC = "dec"

    def format(self, data: bytes) -> str:
        if self is DebugMode.HEX:
            return data.hex(" ")
        return " ".join(str(b) for b in data)


class Status(Enum):
    """Printer lifecycle."""
    IDLE = "idle"          # Nothing buffered
    BUILDING = "building"  # Commands buffered, not yet flushed
    CLOSED = "closed"


class Printer:
    """
    ESC/POS printer bound to one sink.

    Mutating methods return self so calls can be chained.
    """

    DEFAULT_RETRIES = 2
    DEFAULT_RETRY_DELAY = 0.1

    def __init__(
        self,
        sink: Sink,
        profile: Union[str, PrinterProfile] = "default",
        retries: int = DEFAULT_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        debug: Optional[DebugMode] = None,
    ):
        """
        Initialize printer interface.

        Args:
            sink: Transport the commands are written to
            profile: Profile name or PrinterProfile
            retries: Extra write attempts after a failed flush (default 2)
            retry_delay: Delay between attempts in seconds (default 0.1)
            debug: Log each flushed command in this format at DEBUG level
        """
        if retries < 0:
            raise InvalidOptionError(f"retries must be >= 0, got {retries}")
        self.sink = sink
        self.profile = profile if isinstance(profile, PrinterProfile) else get_profile(profile)
        self.retries = retries
        self.retry_delay = retry_delay
        self.debug = debug
        self._builder = CommandBuilder()
        self._closed = False

    def __repr__(self) -> str:
        return f"Printer({self.sink!r}, profile={self.profile.name!r}, status={self.status.value})"

    def set_debug(self, mode: Optional[DebugMode]):
        """Enable/disable command dumps on flush."""
        self.debug = mode

    # ---- Introspection ----

    @property
    def status(self) -> Status:
        if self._closed:
            return Status.CLOSED
        return Status.BUILDING if len(self._builder) else Status.IDLE

    @property
    def state(self) -> PrintState:
        """Text style the printer will be in after the buffered commands."""
        return self._builder.state

    @property
    def commands(self) -> list[PrinterCommand]:
        """Buffered, unflushed commands."""
        return self._builder.commands

    @property
    def buffer(self) -> bytes:
        """Buffered, unflushed bytes."""
        return self._builder.get_commands()

    def _check_open(self):
        if self._closed:
            raise PrinterClosedError("Printer is closed")

    def _queue(self, method, *args, **kwargs) -> "Printer":
        """Run a builder method once the printer is known to be open."""
        self._check_open()
        method(*args, **kwargs)
        return self

    # ---- Printer control ----

    def init(self) -> "Printer":
        """Initialize printer (ESC @)."""
        return self._queue(self._builder.init)

    def reset(self) -> "Printer":
        """Hardware reset (ESC ? LF NUL)."""
        return self._queue(self._builder.reset)

    def raw(self, data: bytes) -> "Printer":
        """Send bytes verbatim."""
        return self._queue(self._builder.raw, data)

    # ---- Text style ----

    def justify(self, mode: JustifyMode) -> "Printer":
        return self._queue(self._builder.justify, mode)

    def font(self, font: Font) -> "Printer":
        return self._queue(self._builder.font, font)

    def bold(self, on: bool = True) -> "Printer":
        return self._queue(self._builder.bold, on)

    def underline(self, mode: UnderlineMode = UnderlineMode.SINGLE) -> "Printer":
        return self._queue(self._builder.underline, mode)

    def double_strike(self, on: bool = True) -> "Printer":
        return self._queue(self._builder.double_strike, on)

    def reverse(self, on: bool = True) -> "Printer":
        return self._queue(self._builder.reverse, on)

    def upside_down(self, on: bool = True) -> "Printer":
        return self._queue(self._builder.upside_down, on)

    def flip(self, on: bool = True) -> "Printer":
        return self._queue(self._builder.flip, on)

    def smoothing(self, on: bool = True) -> "Printer":
        return self._queue(self._builder.smoothing, on)

    def size(self, width: int = 1, height: int = 1) -> "Printer":
        return self._queue(self._builder.size, width, height)

    def reset_size(self) -> "Printer":
        return self._queue(self._builder.reset_size)

    def line_spacing(self, dots: int) -> "Printer":
        return self._queue(self._builder.line_spacing, dots)

    def reset_line_spacing(self) -> "Printer":
        return self._queue(self._builder.reset_line_spacing)

    def page_code(self, code: PageCode) -> "Printer":
        return self._queue(self._builder.page_code, code)

    # ---- Text ----

    def write(self, text: str) -> "Printer":
        return self._queue(self._builder.write, text)

    def writeln(self, text: str = "") -> "Printer":
        return self._queue(self._builder.writeln, text)

    # ---- Paper handling ----

    def feed(self, lines: int = 1) -> "Printer":
        return self._queue(self._builder.feed, lines)

    def cut(self, partial: bool = False, feed: int = 0) -> "Printer":
        """
        Cut the paper.

        Raises:
            UnsupportedError: If the profile has no cutter
        """
        self._check_open()
        if not self.profile.cutter:
            raise UnsupportedError(f"Profile {self.profile.name} has no paper cutter")
        self._builder.cut(partial, feed)
        return self

    def partial_cut(self, feed: int = 0) -> "Printer":
        return self.cut(partial=True, feed=feed)

    def cash_drawer(
        self,
        pin: CashDrawerPin = CashDrawerPin.PIN2,
        on_time: int = 25,
        off_time: int = 250,
    ) -> "Printer":
        return self._queue(self._builder.cash_drawer, pin, on_time, off_time)

    def motion_units(self, x: int, y: int) -> "Printer":
        return self._queue(self._builder.motion_units, x, y)

    # ---- Barcodes ----

    def barcode(
        self,
        symbology: Symbology,
        data: str,
        option: Optional[BarcodeOption] = None,
    ) -> "Printer":
        """
        Print a barcode.

        Raises:
            UnsupportedError: If the profile does not support the symbology
            InvalidOptionError: If data or options are invalid
        """
        self._check_open()
        symbology = Symbology.from_name(symbology)
        if not self.profile.supports_symbology(symbology):
            raise UnsupportedError(f"Profile {self.profile.name} does not support {symbology.value}")
        self._builder.barcode(symbology, data, option)
        return self

    def upca(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.UPC_A, data, option)

    def upce(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.UPC_E, data, option)

    def ean13(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.EAN13, data, option)

    def ean8(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.EAN8, data, option)

    def code39(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.CODE39, data, option)

    def itf(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.ITF, data, option)

    def codabar(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.CODABAR, data, option)

    def code93(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.CODE93, data, option)

    def code128(self, data: str, option: Optional[BarcodeOption] = None) -> "Printer":
        return self.barcode(Symbology.CODE128, data, option)

    # ---- QR codes and images ----

    def qrcode(self, data: Union[str, bytes], option: Optional[QRCodeOption] = None) -> "Printer":
        """
        Print a QR code.

        Uses the native GS ( k command when the profile supports it (or when
        option.native is True), otherwise renders the symbol as a raster image.
        A fixed option.version is only honoured by the raster image, so it
        selects the raster path unless native is forced.

        Raises:
            EncodingTooLargeError: If the data does not fit
            UnsupportedError: If the profile can print neither form
        """
        self._check_open()
        option = option or QRCodeOption()
        if option.native is None:
            native = self.profile.qr_code and option.version is None
        else:
            native = option.native

        if native:
            if not self.profile.qr_code:
                raise UnsupportedError(f"Profile {self.profile.name} has no native QR code support")
            self._builder.qrcode_native(data, option)
            return self

        if not self.profile.raster_graphics:
            if self.profile.qr_code:
                raise UnsupportedError(
                    f"Profile {self.profile.name} has no raster graphics for a fixed-version QR code"
                )
            raise UnsupportedError(f"Profile {self.profile.name} can print neither QR codes nor raster images")
        if option.model != QRCodeModel.MODEL2:
            raise UnsupportedError(f"Raster QR codes are always model 2, got {QRCodeModel(option.model).name}")
        matrix = qr.encode(data, option.correction_level, option.version)
        self._builder.raster(matrix_to_image(matrix, option.size), self.profile.paper_width_dots)
        return self

    def raster(self, img: Image.Image) -> "Printer":
        """
        Print a 1-bit image.

        Raises:
            UnsupportedError: If the profile has no raster graphics
        """
        self._check_open()
        if not self.profile.raster_graphics:
            raise UnsupportedError(f"Profile {self.profile.name} has no raster graphics")
        self._builder.raster(img, self.profile.paper_width_dots)
        return self

    # ---- Output ----

    def _dump(self):
        for cmd in self._builder.commands:
            logger.debug("%s: %s", cmd.name, self.debug.format(cmd.encode()))

    def flush(self) -> "Printer":
        """
        Write the buffer to the sink.

        Transient OSErrors are retried up to `retries` more times. The buffer
        is cleared only after a successful write, so a failed flush can be
        retried by calling flush() again.

        Raises:
            PrinterIOError: If every attempt failed
            PrinterClosedError: If the printer is closed
        """
        self._check_open()
        if not len(self._builder):
            return self

        data = self._builder.get_commands()
        if self.debug is not None:
            self._dump()

        last_error: Optional[OSError] = None
        attempts = self.retries + 1
        for attempt in range(attempts):
            if attempt > 0:
                logger.warning("Write retry %d/%d after error: %s", attempt, self.retries, last_error)
                time.sleep(self.retry_delay)
            try:
                self.sink.open()
                self.sink.write(data)
                self.sink.flush()
            except OSError as e:
                last_error = e
                continue
            logger.debug("Flushed %d bytes to %r", len(data), self.sink)
            self._builder.clear()
            return self

        logger.error("Giving up after %d attempts: %s", attempts, last_error)
        raise PrinterIOError(f"Failed to write to {self.sink!r} after {attempts} attempts: {last_error}") from last_error

    def print_cut(self) -> "Printer":
        """Cut the paper and flush."""
        return self.cut().flush()

    def close(self):
        """
        Close the sink. Unflushed commands are discarded.

        Any later call raises PrinterClosedError; closing twice is a no-op.
        """
        if self._closed:
            return
        if len(self._builder):
            logger.warning("Closing with %d unflushed bytes", len(self._builder))
        self._closed = True
        self._builder.clear()
        self.sink.close()

    def __enter__(self):
        self._check_open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.flush()
        finally:
            self.close()
        return False
