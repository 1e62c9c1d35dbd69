"""
Exception Classes for ESC/POS Printing.

Validation errors are raised before any command bytes are buffered, so a
failed call never leaves a partially-applied command behind.
"""


class PrinterError(Exception):
    """Base exception for all printer errors."""

    pass


class InvalidOptionError(PrinterError, ValueError):
    """Malformed or out-of-range data, length, or numeric parameter."""

    pass


class EncodingTooLargeError(PrinterError):
    """QR data does not fit the largest allowed version at the requested EC level."""

    pass


class UnsupportedError(PrinterError):
    """Feature not available on the selected printer profile."""

    pass


class PrinterIOError(PrinterError):
    """Error writing to or flushing the transport."""

    pass


class PrinterClosedError(PrinterError):
    """Operation attempted after the printer was closed."""

    pass
