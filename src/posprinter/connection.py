"""
Transport Sinks for ESC/POS Printers.

A sink is a byte destination with an explicit lifecycle:
open -> write* -> flush -> close. Sinks raise OSError on transport
failures; the printer decides whether to retry.

Serial and USB support need the optional pyserial and pyusb packages.
"""

import abc
import logging
import socket
from pathlib import Path
from typing import Optional, Union
from urllib.parse import parse_qs, urlparse

from .errors import InvalidOptionError

logger = logging.getLogger(__name__)

DEFAULT_NETWORK_PORT = 9100
DEFAULT_TIMEOUT = 10.0
DEFAULT_BAUDRATE = 9600


class Sink(metaclass=abc.ABCMeta):
    """Abstract base class for all printer transports."""

    @abc.abstractmethod
    def open(self) -> None:
        """Open the transport. Opening an open sink is a no-op."""
        raise NotImplementedError

    @abc.abstractmethod
    def write(self, data: bytes) -> None:
        """Write all of data or raise OSError."""
        raise NotImplementedError

    def flush(self) -> None:
        """Push buffered bytes to the device."""

    @abc.abstractmethod
    def close(self) -> None:
        """Close the transport. Closing a closed sink is a no-op."""
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def is_open(self) -> bool:
        raise NotImplementedError

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class FileSink(Sink):
    """Append commands to a file or device node (e.g. /dev/usb/lp0)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._file = None

    def __repr__(self) -> str:
        return f"FileSink({str(self.path)!r})"

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self) -> None:
        if self._file is None:
            logger.debug("Opening %s", self.path)
            self._file = open(self.path, "ab")

    def write(self, data: bytes) -> None:
        if self._file is None:
            raise OSError(f"{self.path} is not open")
        self._file.write(data)

    def flush(self) -> None:
        if self._file is not None:
            self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug("Closed %s", self.path)


class NetworkSink(Sink):
    """Raw TCP connection to a network printer (JetDirect port 9100)."""

    def __init__(self, host: str, port: int = DEFAULT_NETWORK_PORT, timeout: float = DEFAULT_TIMEOUT):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._socket: Optional[socket.socket] = None

    def __repr__(self) -> str:
        return f"NetworkSink({self.host!r}, {self.port})"

    @property
    def is_open(self) -> bool:
        return self._socket is not None

    def open(self) -> None:
        if self._socket is not None:
            return
        logger.info("Connecting to %s:%d", self.host, self.port)
        self._socket = socket.create_connection((self.host, self.port), timeout=self.timeout)

    def write(self, data: bytes) -> None:
        if self._socket is None:
            raise OSError(f"Not connected to {self.host}:{self.port}")
        try:
            self._socket.sendall(data)
        except OSError:
            # A broken connection is reopened on the next attempt
            self.close()
            raise

    def close(self) -> None:
        if self._socket is not None:
            try:
                self._socket.close()
            finally:
                self._socket = None
            logger.info("Disconnected from %s:%d", self.host, self.port)


def _require_pyserial():
    """Import pyserial, with an install hint when it is missing."""
    try:
        import serial
    except ImportError:
        raise ImportError(
            "Serial printing requires the 'pyserial' package. "
            "Install with: pip install posprinter[serial]"
        ) from None
    return serial


def _require_pyusb():
    """Import pyusb, with an install hint when it is missing."""
    try:
        import usb.core
        import usb.util
    except ImportError:
        raise ImportError(
            "USB printing requires the 'pyusb' package. "
            "Install with: pip install posprinter[usb]"
        ) from None
    return usb


class SerialSink(Sink):
    """Serial port printer (RS-232 or USB-serial adapter)."""

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE, timeout: float = DEFAULT_TIMEOUT):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self._serial = None

    def __repr__(self) -> str:
        return f"SerialSink({self.port!r}, baudrate={self.baudrate})"

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        if self.is_open:
            return
        serial = _require_pyserial()
        logger.info("Opening serial port %s at %d baud", self.port, self.baudrate)
        # serial.SerialException is an OSError
        self._serial = serial.Serial(self.port, baudrate=self.baudrate, timeout=self.timeout,
                                     write_timeout=self.timeout)

    def write(self, data: bytes) -> None:
        if not self.is_open:
            raise OSError(f"Serial port {self.port} is not open")
        self._serial.write(data)

    def flush(self) -> None:
        if self.is_open:
            self._serial.flush()

    def close(self) -> None:
        if self._serial is not None:
            self._serial.close()
            self._serial = None
            logger.info("Closed serial port %s", self.port)


class UsbSink(Sink):
    """USB printer class device, written through its bulk OUT endpoint."""

    def __init__(self, vendor_id: int, product_id: int, interface: int = 0, timeout: int = 5000):
        self.vendor_id = vendor_id
        self.product_id = product_id
        self.interface = interface
        self.timeout = timeout
        self._device = None
        self._endpoint = None

    def __repr__(self) -> str:
        return f"UsbSink({self.vendor_id:04x}:{self.product_id:04x})"

    @property
    def is_open(self) -> bool:
        return self._endpoint is not None

    def open(self) -> None:
        if self.is_open:
            return
        usb = _require_pyusb()
        device = usb.core.find(idVendor=self.vendor_id, idProduct=self.product_id)
        if device is None:
            raise OSError(f"USB printer {self.vendor_id:04x}:{self.product_id:04x} not found")

        # usb.core.USBError is an OSError
        if device.is_kernel_driver_active(self.interface):
            logger.debug("Detaching kernel driver from interface %d", self.interface)
            device.detach_kernel_driver(self.interface)
        device.set_configuration()

        config = device.get_active_configuration()
        endpoint = usb.util.find_descriptor(
            config[(self.interface, 0)],
            custom_match=lambda e: usb.util.endpoint_direction(e.bEndpointAddress) == usb.util.ENDPOINT_OUT,
        )
        if endpoint is None:
            raise OSError(f"USB printer {self!r} has no OUT endpoint")

        self._device = device
        self._endpoint = endpoint
        logger.info("Opened USB printer %04x:%04x", self.vendor_id, self.product_id)

    def write(self, data: bytes) -> None:
        if not self.is_open:
            raise OSError(f"USB printer {self!r} is not open")
        written = self._endpoint.write(data, self.timeout)
        if written != len(data):
            raise OSError(f"Short USB write: {written} of {len(data)} bytes")

    def close(self) -> None:
        if self._device is not None:
            usb = _require_pyusb()
            usb.util.dispose_resources(self._device)
            self._device = None
            self._endpoint = None
            logger.info("Closed USB printer %04x:%04x", self.vendor_id, self.product_id)


def open_target(target: str) -> Sink:
    """
    Build a sink from a target string.

    Supported forms:
        tcp://host[:port]
        serial:///dev/ttyUSB0[?baudrate=19200]
        usb://VID:PID (hex)
        file:///path or a plain filesystem path

    The sink is returned unopened.

    Raises:
        InvalidOptionError: If the target cannot be parsed
    """
    if "://" not in target:
        return FileSink(target)

    url = urlparse(target)
    scheme = url.scheme.lower()

    if scheme == "tcp":
        if not url.hostname:
            raise InvalidOptionError(f"Missing host in target: {target}")
        try:
            port = url.port or DEFAULT_NETWORK_PORT
        except ValueError as e:
            raise InvalidOptionError(f"Invalid port in target: {target}") from e
        return NetworkSink(url.hostname, port)

    if scheme == "serial":
        port = url.path or url.netloc
        if not port:
            raise InvalidOptionError(f"Missing serial port in target: {target}")
        query = parse_qs(url.query)
        try:
            baudrate = int(query.get("baudrate", [DEFAULT_BAUDRATE])[0])
        except ValueError as e:
            raise InvalidOptionError(f"Invalid baudrate in target: {target}") from e
        return SerialSink(port, baudrate=baudrate)

    if scheme == "usb":
        ids = url.netloc.split(":")
        try:
            vendor_id, product_id = (int(value, 16) for value in ids)
        except ValueError as e:
            raise InvalidOptionError(f"USB target must be usb://VID:PID, got: {target}") from e
        return UsbSink(vendor_id, product_id)

    if scheme == "file":
        if not url.path:
            raise InvalidOptionError(f"Missing path in target: {target}")
        return FileSink(url.path)

    raise InvalidOptionError(f"Unsupported target scheme: {url.scheme}")
