"""Barcode scan pipeline: image -> barcode string -> find-or-create lookup.

Exactly one extraction strategy is configured per deployment:

* ``ocr``: Tesseract over the whole image, whitespace stripped out;
* ``symbol``: zbar restricted to the retail symbologies (EAN/UPC).
"""
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pytesseract
from PIL import Image, UnidentifiedImageError

from .inventory_client import InventoryAPIError, InventoryClient

log = logging.getLogger(__name__)

# MPO is how Pillow reports multi-picture JPEGs from phone cameras
ACCEPTED_FORMATS = {"PNG", "JPEG", "MPO", "GIF"}
ACCEPTED_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif"}

INVALID_IMAGE_MSG = "Please upload a valid image file (PNG, JPEG, JPG, or GIF)."
EMPTY_IMAGE_MSG = "Please select an image file to upload."
NO_BARCODE_MSG = "No barcode found in the uploaded image."


class ScanError(Exception):
    """Input rejected before any network call."""


@dataclass
class ScanResult:
    barcode: Optional[str] = None
    product: Optional[Dict[str, Any]] = None
    created: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.product is not None and self.error is None


def load_image(data: bytes) -> Image.Image:
    """Decode ``data`` and make sure it is one of the accepted encodings."""
    if not data:
        raise ScanError(EMPTY_IMAGE_MSG)
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ScanError(INVALID_IMAGE_MSG) from e
    if img.format not in ACCEPTED_FORMATS:
        raise ScanError(INVALID_IMAGE_MSG)
    return img


class OcrExtractor:
    name = "ocr"

    def __init__(self, lang: str = "eng"):
        self.lang = lang

    def extract(self, image: Image.Image) -> Optional[str]:
        text = pytesseract.image_to_string(image.convert("RGB"), lang=self.lang)
        code = re.sub(r"\s+", "", text)
        return code or None


class SymbolExtractor:
    name = "symbol"

    def extract(self, image: Image.Image) -> Optional[str]:
        # zbar is a system library; only needed when this strategy is chosen
        from pyzbar.pyzbar import ZBarSymbol, decode

        symbols = [ZBarSymbol.EAN13, ZBarSymbol.EAN8, ZBarSymbol.UPCA, ZBarSymbol.UPCE]
        decoded = decode(image.convert("RGB"), symbols=symbols)
        for d in decoded:
            value = d.data.decode("utf-8", errors="ignore").strip()
            if value:
                return value
        return None


def make_extractor(strategy: str, lang: str = "eng"):
    strategy = (strategy or "").lower().strip()
    if strategy == "ocr":
        return OcrExtractor(lang)
    if strategy == "symbol":
        return SymbolExtractor()
    raise ValueError(f"Unknown scan strategy: {strategy!r} (expected 'ocr' or 'symbol')")


class ScanPipeline:
    def __init__(self, client: InventoryClient, extractor):
        self.client = client
        self.extractor = extractor

    def scan_file(self, path: Union[str, Path]) -> ScanResult:
        path = Path(path)
        if path.suffix.lower() not in ACCEPTED_SUFFIXES:
            return ScanResult(error=INVALID_IMAGE_MSG)
        try:
            data = path.read_bytes()
        except OSError as e:
            return ScanResult(error=f"Could not read {path.name}: {e.strerror}")
        return self.scan_bytes(data)

    def scan_bytes(self, data: bytes) -> ScanResult:
        try:
            image = load_image(data)
        except ScanError as e:
            return ScanResult(error=str(e))

        try:
            barcode = self.extractor.extract(image)
        except (OSError, RuntimeError, ImportError) as e:
            log.error(f"{self.extractor.name} extraction failed: {e}")
            return ScanResult(error=f"Barcode extraction failed: {e}")
        if not barcode:
            return ScanResult(error=NO_BARCODE_MSG)
        log.info(f"Extracted barcode: {barcode}")

        try:
            product, created = self.client.lookup_product(barcode)
        except InventoryAPIError as e:
            log.warning(f"Lookup of {barcode} failed: {e}")
            return ScanResult(
                barcode=barcode,
                error=e.message or "Product data is currently unavailable. Please try again later.",
            )
        return ScanResult(barcode=barcode, product=product, created=created)
