"""
Printer Profiles.

Static feature flags for known printer models. A profile decides whether a
feature is available and how QR codes are serialized; nothing is queried
from the printer itself.
"""

from dataclasses import dataclass

from .barcodes import Symbology
from .errors import InvalidOptionError

ALL_SYMBOLOGIES = frozenset(Symbology)


@dataclass(frozen=True)
class PrinterProfile:
    """
    Printer capabilities.

    Attributes:
        name: Profile name
        qr_code: Printer understands the native GS ( k QR command
        cutter: Printer has an auto cutter (GS V)
        raster_graphics: Printer understands GS v 0 raster images
        symbologies: Barcode systems accepted by GS k
        paper_width_dots: Printable width in dots
    """
    name: str
    qr_code: bool = True
    cutter: bool = True
    raster_graphics: bool = True
    symbologies: frozenset = ALL_SYMBOLOGIES
    paper_width_dots: int = 512

    def supports_symbology(self, symbology: Symbology) -> bool:
        return Symbology.from_name(symbology) in self.symbologies


PROFILES = {
    profile.name: profile
    for profile in (
        PrinterProfile("default"),
        # Generic printer without QR, cutter or graphics support
        PrinterProfile(
            "simple",
            qr_code=False,
            cutter=False,
            raster_graphics=False,
            symbologies=frozenset({
                Symbology.UPC_A, Symbology.UPC_E, Symbology.EAN13, Symbology.EAN8,
                Symbology.CODE39, Symbology.ITF, Symbology.CODABAR,
            }),
        ),
        PrinterProfile("TM-T20II", paper_width_dots=576),
        PrinterProfile("TM-T88V", paper_width_dots=512),
        # 58mm printer: raster only, no cutter
        PrinterProfile("POS-5890", qr_code=False, cutter=False, paper_width_dots=384),
    )
}


def get_profile(name: str) -> PrinterProfile:
    """
    Look up a built-in profile by name (case-insensitive).

    Raises:
        InvalidOptionError: If no profile has that name
    """
    for profile_name, profile in PROFILES.items():
        if profile_name.lower() == name.lower():
            return profile
    raise InvalidOptionError(f"Unknown printer profile: {name}. Available: {list(PROFILES)}")
