"""
Command-Line Interface for ESC/POS Printers.

Usage:
    posprint text "Hello"             - Print a line of text
    posprint barcode DATA --type ean13 - Print a barcode
    posprint qr DATA                  - Print a QR code
    posprint cut                      - Cut the paper
    posprint config set TARGET        - Save the default printer
"""

import logging
import sys
from typing import Callable

import click

from .barcodes import BarcodeOption, Symbology
from .config import DEFAULT_PROFILE, clear_config, load_config, save_config
from .connection import open_target
from .errors import InvalidOptionError, PrinterError, PrinterIOError, UnsupportedError
from .printer import DebugMode, Printer
from .profiles import PROFILES, get_profile
from .protocol import HriPosition, JustifyMode
from .qr import QRCodeOption, QRErrorCorrection


def validate_profile(ctx, param, value):
    """Validate a printer profile name.

    Raises:
        click.BadParameter: If no built-in profile has that name
    """
    if value is None:
        return None
    try:
        return get_profile(value).name
    except InvalidOptionError as e:
        raise click.BadParameter(str(e))


def validate_target(ctx, param, value):
    """Validate a target string (tcp://, serial://, usb://, file:// or path).

    Raises:
        click.BadParameter: If the target cannot be parsed
    """
    if value is None:
        return None
    try:
        open_target(value)
    except InvalidOptionError as e:
        raise click.BadParameter(str(e))
    return value


def _resolve(ctx) -> tuple[str, str]:
    """Target and profile from the command line, falling back to the saved config."""
    target = ctx.obj["target"]
    profile = ctx.obj["profile"]
    saved = load_config()
    if target is None:
        if saved is None:
            click.echo("No target given. Use --target or 'posprint config set TARGET'.", err=True)
            sys.exit(1)
        target = saved.target
    if profile is None:
        profile = saved.profile if saved is not None else DEFAULT_PROFILE
    return target, profile


def _run(ctx, build: Callable[[Printer], None]):
    """Open the printer, queue commands with build(), flush and close."""
    target, profile = _resolve(ctx)
    debug = DebugMode.HEX if ctx.obj["debug"] else None
    try:
        printer = Printer(open_target(target), profile=profile, retries=ctx.obj["retry"], debug=debug)
        with printer:
            printer.init()
            build(printer)
    except ImportError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    except InvalidOptionError as e:
        click.echo(f"Invalid option: {e}", err=True)
        sys.exit(1)
    except UnsupportedError as e:
        click.echo(f"Unsupported: {e}", err=True)
        sys.exit(1)
    except PrinterIOError as e:
        click.echo(f"Connection error: {e}", err=True)
        sys.exit(1)
    except PrinterError as e:
        click.echo(f"Printer error: {e}", err=True)
        sys.exit(1)
    except OSError as e:
        # Raised by sink.close() on the way out
        click.echo(f"Connection error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--target", "-t", callback=validate_target,
              help="Printer target, e.g. tcp://192.168.1.50:9100 (default: saved config)")
@click.option("--profile", "-p", callback=validate_profile,
              help=f"Printer profile: {', '.join(PROFILES)} (default: saved config)")
@click.option("--retry", default=2, type=click.IntRange(0, 10), help="Number of retries for transient failures")
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.pass_context
def main(ctx, target, profile, retry, debug):
    """ESC/POS Receipt Printer CLI."""
    ctx.ensure_object(dict)
    ctx.obj["target"] = target
    ctx.obj["profile"] = profile
    ctx.obj["retry"] = retry
    ctx.obj["debug"] = debug
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@main.command()
@click.argument("lines", nargs=-1, required=True)
@click.option("--align", type=click.Choice(["left", "center", "right"]), default="left",
              help="Justification (default: left)")
@click.option("--bold", is_flag=True, help="Emphasized text")
@click.option("--size", type=click.IntRange(1, 8), default=1, help="Character magnification (1-8)")
@click.option("--cut", is_flag=True, help="Cut the paper afterwards")
@click.pass_context
def text(ctx, lines, align, bold, size, cut):
    """Print lines of text.

    Examples:
        posprint text "Hello" "World"
        posprint -t tcp://192.168.1.50 text "TOTAL 12.00" --bold --align right
    """

    def build(printer: Printer):
        printer.justify(JustifyMode[align.upper()]).bold(bold).size(size, size)
        for line in lines:
            printer.writeln(line)
        if cut:
            printer.feed(3).cut()

    _run(ctx, build)
    click.echo(f"Printed {len(lines)} line(s)")


@main.command()
@click.argument("data")
@click.option(
    "--type",
    "barcode_type",
    type=click.Choice([s.value for s in Symbology], case_sensitive=False),
    default=Symbology.CODE128.value,
    help="Barcode type (default: CODE128)",
)
@click.option("--height", type=click.IntRange(1, 255), default=162, help="Bar height in dots")
@click.option("--width", type=click.IntRange(2, 6), default=3, help="Module width in dots")
@click.option("--hri", type=click.Choice([p.name.lower() for p in HriPosition]), default="below",
              help="Human readable text position (default: below)")
@click.option("--cut", is_flag=True, help="Cut the paper afterwards")
@click.pass_context
def barcode(ctx, data, barcode_type, height, width, hri, cut):
    """Print a barcode.

    DATA is the content to encode (digits only for UPC/EAN/ITF).

    Examples:
        posprint barcode 400638133393 --type EAN13
        posprint barcode "HELLO" --type CODE39 --hri none
    """
    symbology = Symbology.from_name(barcode_type)
    option = BarcodeOption(width=width, height=height, position=HriPosition[hri.upper()])

    def build(printer: Printer):
        printer.barcode(symbology, data, option)
        if cut:
            printer.feed(3).cut()

    _run(ctx, build)
    click.echo(f"{symbology.value} barcode printed!")


@main.command()
@click.argument("data")
@click.option("--size", type=click.IntRange(1, 16), default=4, help="Module size in dots (1-16)")
@click.option(
    "--error-correction",
    type=click.Choice(["L", "M", "Q", "H"]),
    default="M",
    help="Error correction level (L=7%%, M=15%%, Q=25%%, H=30%%)",
)
@click.option("--native/--raster", default=None,
              help="Force the printer's QR command or a raster image (default: by profile)")
@click.option("--cut", is_flag=True, help="Cut the paper afterwards")
@click.pass_context
def qr(ctx, data, size, error_correction, native, cut):
    """Print a QR code.

    DATA is the content to encode (URL, text, etc.).

    Examples:
        posprint qr "https://example.com"
        posprint qr "Hello World" --size 6 --error-correction H --raster
    """
    option = QRCodeOption(
        size=size,
        correction_level=QRErrorCorrection[error_correction],
        native=native,
    )

    def build(printer: Printer):
        printer.justify(JustifyMode.CENTER).qrcode(data, option).justify(JustifyMode.LEFT)
        if cut:
            printer.feed(3).cut()

    _run(ctx, build)
    click.echo("QR code printed!")


@main.command()
@click.option("--partial", is_flag=True, help="Leave one point uncut")
@click.option("--feed", type=click.IntRange(0, 255), default=0, help="Feed before cutting (motion units)")
@click.pass_context
def cut(ctx, partial, feed):
    """Cut the paper."""
    _run(ctx, lambda printer: printer.cut(partial=partial, feed=feed))
    click.echo("Paper cut")


@main.group()
def config():
    """Manage the saved default printer."""


@config.command("show")
def config_show():
    """Show the saved default printer."""
    saved = load_config()
    if saved is None:
        click.echo("No saved printer.")
        return
    click.echo(f"Target:  {saved.target}")
    click.echo(f"Profile: {saved.profile}")


@config.command("set")
@click.argument("target", callback=validate_target)
@click.option("--profile", "-p", "profile_name", callback=validate_profile, default=DEFAULT_PROFILE,
              help="Printer profile (default: default)")
def config_set(target, profile_name):
    """Save TARGET (and profile) as the default printer.

    Examples:
        posprint config set tcp://192.168.1.50:9100 --profile TM-T88V
        posprint config set "serial:///dev/ttyUSB0?baudrate=19200"
    """
    saved = save_config(target, profile_name)
    click.echo(f"Saved {saved.target} ({saved.profile})")


@config.command("clear")
def config_clear():
    """Forget the saved default printer."""
    if clear_config():
        click.echo("Saved printer cleared.")
    else:
        click.echo("No saved printer.")


if __name__ == "__main__":
    main()
