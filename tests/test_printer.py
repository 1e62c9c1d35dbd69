"""Tests for the high-level printer."""

import logging
from unittest.mock import patch

import pytest
from PIL import Image

from posprinter import (
    BarcodeOption,
    DebugMode,
    EncodingTooLargeError,
    InvalidOptionError,
    JustifyMode,
    Printer,
    PrinterClosedError,
    PrinterError,
    PrinterIOError,
    QRCodeOption,
    QRErrorCorrection,
    Status,
    UnsupportedError,
)
from posprinter.profiles import PrinterProfile, get_profile


class TestExceptionHierarchy:
    """Test exception class hierarchy."""

    @pytest.mark.parametrize(
        "error",
        [InvalidOptionError, EncodingTooLargeError, UnsupportedError, PrinterIOError, PrinterClosedError],
    )
    def test_is_printer_error(self, error):
        """Every error inherits from PrinterError."""
        assert issubclass(error, PrinterError)


class TestPrinterInit:
    """Test construction and profiles."""

    def test_unknown_profile(self, sink):
        """Unknown profile names raise InvalidOptionError."""
        with pytest.raises(InvalidOptionError, match="Unknown printer profile"):
            Printer(sink, profile="nope")

    def test_profile_lookup_ignores_case(self):
        """Profile names are matched case-insensitively."""
        assert get_profile("tm-t88v").name == "TM-T88V"

    def test_negative_retries(self, sink):
        """retries must not be negative."""
        with pytest.raises(InvalidOptionError):
            Printer(sink, retries=-1)

    def test_starts_idle(self, printer, sink):
        """A new printer has nothing buffered and has not opened the sink."""
        assert printer.status is Status.IDLE
        assert not sink.is_open


class TestBuffering:
    """Test the chainable API and buffer."""

    def test_chaining(self, printer):
        """Methods return the printer."""
        assert printer.init().bold().writeln("Hi").feed(2) is printer

    def test_status_building(self, printer):
        """Buffered commands move the printer to BUILDING."""
        printer.writeln("x")
        assert printer.status is Status.BUILDING

    def test_nothing_written_before_flush(self, printer, sink):
        """Commands stay in the buffer until flush()."""
        printer.init().writeln("x")
        assert sink.writes == []

    def test_repeated_justify_is_idempotent(self, printer):
        """Two identical justify calls produce the same buffer as one."""
        printer.justify(JustifyMode.CENTER)
        once = printer.buffer
        printer.justify(JustifyMode.CENTER)
        assert printer.buffer == once

    def test_rejected_call_leaves_buffer(self, printer):
        """A failed call leaves buffer and state untouched."""
        printer.init().bold().write("a")
        before, state = printer.buffer, printer.state
        with pytest.raises(InvalidOptionError):
            printer.ean13("12345678901X")
        with pytest.raises(InvalidOptionError):
            printer.size(9, 1)
        assert printer.buffer == before
        assert printer.state == state


class TestInvalidBarcodeData:
    """Invalid characters are rejected for every symbology."""

    @pytest.mark.parametrize(
        "method,data",
        [
            ("upca", "0360002914X"),
            ("upce", "42526X"),
            ("ean13", "40063813339X"),
            ("ean8", "551234X"),
            ("code39", "abc"),
            ("itf", "12X4"),
            ("codabar", "A12#B"),
            ("code93", "caf\u00e9"),
            ("code128", "caf\u00e9"),
        ],
    )
    def test_invalid_character_leaves_buffer(self, printer, method, data):
        """The call raises InvalidOptionError and buffers nothing."""
        printer.init().bold().write("a")
        before, state = printer.buffer, printer.state
        with pytest.raises(InvalidOptionError):
            getattr(printer, method)(data)
        assert printer.buffer == before
        assert printer.state == state


class TestFlush:
    """Test writing the buffer to the sink."""

    def test_flush_writes_buffer_in_order(self, printer, sink):
        """flush() writes all bytes in call order and clears the buffer."""
        printer.init().justify(JustifyMode.CENTER).writeln("Hi")
        printer.flush()
        assert sink.data == b"\x1b@\x1ba\x01Hi\n"
        assert printer.buffer == b""
        assert printer.status is Status.IDLE

    def test_flush_empty_buffer_no_io(self, printer, sink):
        """Flushing nothing touches no I/O."""
        printer.flush()
        assert sink.open_count == 0
        assert sink.writes == []

    def test_flush_calls_sink_flush(self, printer, sink):
        """The sink is flushed after the write."""
        printer.writeln("x").flush()
        assert sink.flush_count == 1

    def test_retry_delivers_once(self, flaky_sink_factory):
        """Transient failures are retried and the buffer is sent exactly once."""
        sink = flaky_sink_factory(failures=2)
        printer = Printer(sink, retries=2, retry_delay=0)
        printer.init().writeln("retry")
        printer.flush()
        assert sink.attempts == 3
        assert sink.writes == [b"\x1b@retry\n"]

    def test_retry_sleeps_between_attempts(self, flaky_sink_factory):
        """retry_delay is slept before every retry."""
        sink = flaky_sink_factory(failures=1)
        printer = Printer(sink, retries=1, retry_delay=0.5)
        printer.writeln("x")
        with patch("posprinter.printer.time.sleep") as sleep:
            printer.flush()
        sleep.assert_called_once_with(0.5)

    def test_exhausted_retries_keep_buffer(self, flaky_sink_factory):
        """After the last failure PrinterIOError is raised and the buffer kept."""
        sink = flaky_sink_factory(failures=5)
        printer = Printer(sink, retries=2, retry_delay=0)
        printer.writeln("keep")
        with pytest.raises(PrinterIOError) as exc_info:
            printer.flush()
        assert isinstance(exc_info.value.__cause__, OSError)
        assert sink.attempts == 3
        assert printer.buffer == b"keep\n"
        assert printer.status is Status.BUILDING

    def test_flush_again_after_failure(self, flaky_sink_factory):
        """A failed flush can be retried later."""
        sink = flaky_sink_factory(failures=1)
        printer = Printer(sink, retries=0, retry_delay=0)
        printer.writeln("later")
        with pytest.raises(PrinterIOError):
            printer.flush()
        printer.flush()
        assert sink.writes == [b"later\n"]

    def test_partial_cut(self, printer, sink):
        """partial_cut() emits GS V B with the feed amount."""
        printer.partial_cut(feed=4).flush()
        assert sink.data == b"\x1dVB\x04"

    def test_reset(self, printer):
        """reset() queues ESC ? LF NUL and restores the default style."""
        printer.bold().reset()
        assert printer.buffer == b"\x1bE\x01\x1b?\n\x00"
        assert not printer.state.bold

    def test_print_cut(self, printer, sink):
        """print_cut() appends a cut and flushes."""
        printer.writeln("x").print_cut()
        assert sink.data == b"x\n\x1dVA\x00"

    def test_debug_dump(self, sink, caplog):
        """Debug mode logs each command on flush."""
        printer = Printer(sink, debug=DebugMode.HEX)
        printer.init()
        with caplog.at_level(logging.DEBUG, logger="posprinter.printer"):
            printer.flush()
        assert "init: 1b 40" in caplog.text

    def test_set_debug(self, printer, caplog):
        """set_debug() switches the dump on and off."""
        printer.set_debug(DebugMode.DEC)
        printer.init()
        with caplog.at_level(logging.DEBUG, logger="posprinter.printer"):
            printer.flush()
        assert "init: 27 64" in caplog.text

        caplog.clear()
        printer.set_debug(None)
        printer.init()
        with caplog.at_level(logging.DEBUG, logger="posprinter.printer"):
            printer.flush()
        assert "init:" not in caplog.text

    def test_debug_dec_format(self):
        """DEC mode prints decimal byte values."""
        assert DebugMode.DEC.format(b"\x1b@") == "27 64"
        assert DebugMode.HEX.format(b"\x1b@") == "1b 40"


class TestClose:
    """Test the closed state."""

    def test_calls_after_close_raise(self, printer, sink):
        """Any operation after close() raises PrinterClosedError."""
        printer.close()
        assert sink.closed
        assert printer.status is Status.CLOSED
        with pytest.raises(PrinterClosedError):
            printer.writeln("x")
        with pytest.raises(PrinterClosedError):
            printer.flush()
        with pytest.raises(PrinterClosedError):
            printer.qrcode("x")

    def test_close_twice(self, printer):
        """Closing twice is a no-op."""
        printer.close()
        printer.close()

    def test_close_does_not_flush(self, printer, sink):
        """Unflushed commands are discarded on close."""
        printer.writeln("x")
        printer.close()
        assert sink.writes == []

    def test_context_manager_flushes(self, sink):
        """Leaving the block flushes then closes."""
        with Printer(sink) as printer:
            printer.writeln("ctx")
        assert sink.data == b"ctx\n"
        assert sink.closed

    def test_context_manager_error_skips_flush(self, sink):
        """An exception in the block closes without flushing."""
        with pytest.raises(RuntimeError):
            with Printer(sink) as printer:
                printer.writeln("lost")
                raise RuntimeError("boom")
        assert sink.writes == []
        assert sink.closed


class TestProfiles:
    """Test profile feature checks."""

    def test_cut_without_cutter(self, sink):
        """Cutting on a profile without cutter is unsupported."""
        printer = Printer(sink, profile="simple")
        with pytest.raises(UnsupportedError, match="cutter"):
            printer.cut()
        assert printer.buffer == b""

    def test_symbology_not_in_profile(self, sink):
        """Barcodes outside the profile's list are unsupported."""
        printer = Printer(sink, profile="simple")
        with pytest.raises(UnsupportedError, match="CODE128"):
            printer.code128("ABC")
        printer.ean8("5512345")

    def test_qr_without_support(self, sink):
        """QR codes need native QR or raster graphics."""
        printer = Printer(sink, profile="simple")
        with pytest.raises(UnsupportedError):
            printer.qrcode("hello")

    def test_custom_profile(self, sink):
        """A PrinterProfile instance can be passed directly."""
        profile = PrinterProfile("mine", cutter=False)
        printer = Printer(sink, profile=profile)
        assert printer.profile is profile


class TestBarcodes:
    """Test barcode helpers."""

    @pytest.mark.parametrize(
        "method,data,system",
        [
            ("upca", "03600029145", 65),
            ("upce", "425261", 66),
            ("ean13", "400638133393", 67),
            ("ean8", "5512345", 68),
            ("code39", "ABC", 69),
            ("itf", "1234", 70),
            ("codabar", "A123B", 71),
            ("code93", "abc", 72),
            ("code128", "abc", 73),
        ],
    )
    def test_helpers(self, printer, method, data, system):
        """Each helper emits GS k with its symbology."""
        getattr(printer, method)(data)
        assert printer.commands[-1].payload[0] == system

    def test_custom_option(self, printer):
        """Options are emitted before the barcode."""
        printer.ean8("5512345", BarcodeOption(height=80))
        assert printer.buffer.startswith(b"\x1dh\x50")


class TestQRCode:
    """Test QR printing paths."""

    def test_native_on_default_profile(self, printer):
        """Default profile uses GS ( k."""
        printer.qrcode("hello")
        assert printer.commands[-1].name == "qr_print"

    def test_raster_fallback(self, sink):
        """Profiles without native QR print a raster image."""
        printer = Printer(sink, profile="POS-5890")
        printer.qrcode("HELLO WORLD", QRCodeOption(size=4))
        cmd = printer.commands[-1]
        assert cmd.name == "raster"
        # 21 modules * 4 dots = 84 dots = 11 bytes wide, 84 rows
        assert cmd.payload[:5] == b"\x00\x0b\x00\x54\x00"

    def test_forced_raster(self, printer):
        """native=False forces the raster path."""
        printer.qrcode("hello", QRCodeOption(native=False))
        assert printer.commands[-1].name == "raster"

    def test_forced_native_unsupported(self, sink):
        """native=True on a profile without QR support is rejected."""
        printer = Printer(sink, profile="POS-5890")
        with pytest.raises(UnsupportedError):
            printer.qrcode("hello", QRCodeOption(native=True))

    def test_fixed_version_uses_raster(self, printer):
        """A fixed version prints as a raster image of that version."""
        printer.qrcode("A", QRCodeOption(version=10, size=2))
        cmd = printer.commands[-1]
        assert cmd.name == "raster"
        # Version 10 is 57 modules, 114 dots = 15 bytes wide
        assert cmd.payload[:5] == b"\x00\x0f\x00\x72\x00"

    def test_fixed_version_differs_from_auto(self, sink):
        """The requested version changes what is printed."""
        fixed = Printer(sink).qrcode("A", QRCodeOption(version=10)).buffer
        auto = Printer(sink).qrcode("A", QRCodeOption()).buffer
        assert fixed != auto

    def test_fixed_version_forced_native(self, printer):
        """Forcing the native command with a fixed version is unsupported."""
        with pytest.raises(UnsupportedError, match="version"):
            printer.qrcode("A", QRCodeOption(version=10, native=True))
        assert printer.buffer == b""

    def test_fixed_version_without_raster(self, sink):
        """A fixed version needs raster graphics."""
        profile = PrinterProfile("native-only", raster_graphics=False)
        printer = Printer(sink, profile=profile)
        with pytest.raises(UnsupportedError, match="fixed-version"):
            printer.qrcode("A", QRCodeOption(version=2))

    def test_raster_wider_than_paper(self, sink):
        """A raster symbol wider than the paper is rejected."""
        printer = Printer(sink, profile="POS-5890")
        with pytest.raises(InvalidOptionError, match="printable width"):
            printer.qrcode("x" * 200, QRCodeOption(size=16))
        assert printer.buffer == b""

    def test_too_large(self, printer):
        """Oversized data raises EncodingTooLargeError and buffers nothing."""
        with pytest.raises(EncodingTooLargeError):
            printer.qrcode(b"a" * 1300, QRCodeOption(correction_level=QRErrorCorrection.H))
        assert printer.buffer == b""

    def test_raster_image(self, printer):
        """raster() prints a 1-bit image."""
        printer.raster(Image.new("1", (8, 8), color=0))
        assert printer.commands[-1].name == "raster"
