"""ESC/POS Thermal Receipt Printer Driver."""

__version__ = "0.1.0"

from .errors import (
    PrinterError,
    InvalidOptionError,
    EncodingTooLargeError,
    UnsupportedError,
    PrinterIOError,
    PrinterClosedError,
)
from .protocol import (
    JustifyMode,
    Font,
    UnderlineMode,
    HriPosition,
    HriFont,
    CashDrawerPin,
    PageCode,
    PrinterCommand,
)
from .commands import CommandBuilder, PrintState
from .barcodes import Symbology, BarcodeOption
from .qr import QRErrorCorrection, QRMatrix, QRMode, QRCodeModel, QRCodeOption
from .profiles import PrinterProfile, get_profile
from .connection import Sink, FileSink, NetworkSink, SerialSink, UsbSink, open_target
from .printer import Printer, DebugMode, Status

__all__ = [
    "PrinterError",
    "InvalidOptionError",
    "EncodingTooLargeError",
    "UnsupportedError",
    "PrinterIOError",
    "PrinterClosedError",
    "JustifyMode",
    "Font",
    "UnderlineMode",
    "HriPosition",
    "HriFont",
    "CashDrawerPin",
    "PageCode",
    "PrinterCommand",
    "CommandBuilder",
    "PrintState",
    "Symbology",
    "BarcodeOption",
    "QRErrorCorrection",
    "QRMatrix",
    "QRMode",
    "QRCodeModel",
    "QRCodeOption",
    "PrinterProfile",
    "get_profile",
    "Sink",
    "FileSink",
    "NetworkSink",
    "SerialSink",
    "UsbSink",
    "open_target",
    "Printer",
    "DebugMode",
    "Status",
]
