"""
Registry of available tilesets.

Loads tileset records from a catalog JSON file (a list of records or an
object with a ``tilesets`` list) and lazily opens and slices their images
with Pillow. Image paths in ``imageUrl`` are resolved relative to the
catalog file unless absolute.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Optional, cast

import orjson
from PIL import Image

from ..maps.models import TileRef
from .models import Tileset, TileSheet


class TilesetCatalog:
    """Facade for tileset lookups and tile images.

    Records are registered up front; sheet images are opened on first use
    and cached. Missing or unreadable images are logged once and the
    tileset stays usable for selection, only without images.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.base_dir = base_dir

        self._tilesets: dict[int, Tileset] = {}
        self._sheets: dict[int, TileSheet] = {}
        self._failed_sheets: set[int] = set()
        # Thread safety lock for the sheet cache
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, path: Path) -> "TilesetCatalog":
        """Create a catalog from a catalog JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If JSON is invalid or a record is malformed
        """
        catalog = cls(base_dir=path.parent)
        catalog.load_catalog(path)
        return catalog

    def load_catalog(self, path: Path) -> int:
        """Register every tileset record from a catalog JSON file.

        Returns:
            Number of tilesets registered

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If JSON is invalid or a record is malformed
        """
        if not path.exists():
            raise FileNotFoundError(f"Tileset catalog not found: {path}")

        try:
            with path.open("rb") as f:  # orjson works with bytes
                data = orjson.loads(f.read())
        except orjson.JSONDecodeError as e:
            raise ValueError(f"Failed to parse tileset catalog {path}: {e}") from e

        if isinstance(data, dict) and "tilesets" in data:
            data = cast(dict[str, Any], data)["tilesets"]
        if not isinstance(data, list):
            raise ValueError(f"Tileset catalog {path} must contain a list of tilesets")

        records: list[Tileset] = []
        for idx, record in enumerate(cast(list[Any], data)):
            if not isinstance(record, dict):
                raise ValueError(f"Tileset record {idx} in {path} is not an object")
            try:
                records.append(Tileset.from_dict(cast(dict[str, Any], record)))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Tileset record {idx} in {path} is invalid: {e}") from e

        for tileset in records:
            self.register(tileset)

        self.logger.info(f"Registered {len(records)} tileset(s) from {path}")
        return len(records)

    def register(self, tileset: Tileset, image: Optional[Image.Image] = None) -> None:
        """Register a tileset, optionally with an already loaded image.

        Registering an id again replaces the record and drops its cached sheet.
        """
        with self._lock:
            self._tilesets[tileset.id] = tileset
            self._sheets.pop(tileset.id, None)
            self._failed_sheets.discard(tileset.id)
            if image is not None:
                self._sheets[tileset.id] = TileSheet(tileset, image)
        self.logger.debug(f"  tileset {tileset.id}: {tileset.name} ({tileset.grid_width}x{tileset.grid_height})")

    # ---------------------------------------------------------------------
    # Lookups
    # ---------------------------------------------------------------------
    def get(self, tileset_id: int) -> Optional[Tileset]:
        """Get a tileset record by id, or None."""
        return self._tilesets.get(tileset_id)

    def get_tilesets(self) -> list[Tileset]:
        """Get all tilesets, sorted by id."""
        return [self._tilesets[key] for key in sorted(self._tilesets)]

    def first_tileset_id(self) -> Optional[int]:
        """Get the id of the first tileset, used as the default selection."""
        tilesets = self.get_tilesets()
        return tilesets[0].id if tilesets else None

    def is_valid_ref(self, ref: TileRef) -> bool:
        """Check a reference against its tileset's current grid."""
        tileset = self.get(ref.tileset_id)
        return tileset is not None and tileset.contains(ref.col, ref.row)

    def __len__(self) -> int:
        return len(self._tilesets)

    def __contains__(self, tileset_id: object) -> bool:
        return tileset_id in self._tilesets

    # ---------------------------------------------------------------------
    # Images
    # ---------------------------------------------------------------------
    def resolve_image_path(self, tileset: Tileset) -> Path:
        """Get the file path of a tileset image."""
        path = Path(tileset.image_url)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def get_sheet(self, tileset_id: int) -> Optional[TileSheet]:
        """Return the sliced sheet of a tileset, loading it on first use."""
        with self._lock:
            sheet = self._sheets.get(tileset_id)
            if sheet is not None or tileset_id in self._failed_sheets:
                return sheet

            tileset = self._tilesets.get(tileset_id)
            if tileset is None:
                return None

            image_path = self.resolve_image_path(tileset)
            try:
                with Image.open(image_path) as image:
                    sheet = TileSheet(tileset, image)
            except (OSError, ValueError) as e:
                self.logger.warning(f"Failed to load image for tileset '{tileset.name}' from {image_path}: {e}")
                self._failed_sheets.add(tileset_id)
                return None

            self._sheets[tileset_id] = sheet
            self.logger.debug(f"Loaded sheet for tileset '{tileset.name}' with {len(sheet.tiles)} tile(s)")
            return sheet

    def get_tile_image(self, ref: TileRef) -> Image.Image | None:
        """Return the image of a referenced tile, or None if unavailable."""
        sheet = self.get_sheet(ref.tileset_id)
        if sheet is None:
            return None
        return sheet.get_tile(ref.col, ref.row)
