"""
Data models for tilesets and tile selections.

Each model is intentionally lightweight: no file-system or service logic.
Image loading lives in `tilemaped.tilesets.catalog`.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

from PIL import Image

from ..maps.models import TileRef


# =============================================================================
# Tileset Models
# =============================================================================

@dataclass
class Tileset:
    """Tileset record as supplied by the tileset catalog.

    A tileset is one image cut into a ``grid_width`` x ``grid_height`` grid
    of tiles, each ``tile_width`` x ``tile_height`` pixels. Ownership and
    public visibility are carried through for the storage layer only.
    """
    id: int
    name: str
    image_url: str
    tile_width: int
    tile_height: int
    grid_width: int
    grid_height: int
    user_id: Optional[int] = None
    is_public: bool = False

    def __post_init__(self) -> None:
        """Validate tile and grid dimensions."""
        for name in ("tile_width", "tile_height", "grid_width", "grid_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"Tileset '{self.name}': '{name}' must be a positive integer, got {value!r}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tileset":
        """Create Tileset from a catalog JSON record.

        Args:
            data: Record with camelCase keys (``imageUrl``, ``tileWidth``, ...)

        Returns:
            Tileset with properly typed fields
        """
        user_id = data.get("userId")
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", f"Tileset {data['id']}")),
            image_url=str(data["imageUrl"]),
            tile_width=int(data["tileWidth"]),
            tile_height=int(data["tileHeight"]),
            grid_width=int(data["gridWidth"]),
            grid_height=int(data["gridHeight"]),
            user_id=int(user_id) if user_id is not None else None,
            is_public=bool(data.get("isPublic", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to a catalog JSON record."""
        return {
            "id": self.id,
            "name": self.name,
            "imageUrl": self.image_url,
            "tileWidth": self.tile_width,
            "tileHeight": self.tile_height,
            "gridWidth": self.grid_width,
            "gridHeight": self.grid_height,
            "userId": self.user_id,
            "isPublic": self.is_public,
        }

    @property
    def tile_count(self) -> int:
        return self.grid_width * self.grid_height

    @property
    def image_size(self) -> tuple[int, int]:
        """Pixel size the tileset image is expected to have."""
        return (self.grid_width * self.tile_width, self.grid_height * self.tile_height)

    def contains(self, col: int, row: int) -> bool:
        """Check whether (col, row) is a tile of this tileset."""
        return 0 <= col < self.grid_width and 0 <= row < self.grid_height

    def tile_ref(self, col: int, row: int) -> TileRef:
        """Get the reference for a tile of this tileset.

        Raises:
            ValueError: If (col, row) is outside the tileset grid
        """
        if not self.contains(col, row):
            raise ValueError(
                f"Tile ({col}, {row}) out of bounds for tileset '{self.name}' "
                f"({self.grid_width}x{self.grid_height})"
            )
        return TileRef(self.id, col, row)

    def tile_refs(self) -> Iterator[TileRef]:
        """Iterate over every pickable tile, row by row."""
        for row in range(self.grid_height):
            for col in range(self.grid_width):
                yield TileRef(self.id, col, row)

    def source_box(self, col: int, row: int) -> tuple[int, int, int, int]:
        """Get the (left, top, right, bottom) pixel box of a tile in the image."""
        left = col * self.tile_width
        top = row * self.tile_height
        return (left, top, left + self.tile_width, top + self.tile_height)


@dataclass
class TileSheet:
    """Tileset image sliced into individual tiles.

    Precomputes all tiles for O(1) lookup. Tiles that fall outside the actual
    image (image smaller than the declared grid) are simply missing.
    """
    tileset: Tileset
    image: Image.Image
    tiles: dict[tuple[int, int], Image.Image] = field(default_factory=dict)

    def __post_init__(self):
        self.image = self.image.convert("RGBA")
        self._precut_all()

    def _precut_all(self):
        """Slice the image into tiles using the tileset's own tile size."""
        self.tiles = {}
        img_width, img_height = self.image.size
        cols = min(self.tileset.grid_width, img_width // self.tileset.tile_width)
        rows = min(self.tileset.grid_height, img_height // self.tileset.tile_height)

        for row in range(rows):
            for col in range(cols):
                self.tiles[(col, row)] = self.image.crop(self.tileset.source_box(col, row))

    def get_tile(self, col: int, row: int) -> Image.Image | None:
        """Return the tile image at (col, row), or None if not present."""
        return self.tiles.get((col, row))


# =============================================================================
# Selection Models
# =============================================================================

SelectionRows = tuple[tuple[Optional[TileRef], ...], ...]


@dataclass(frozen=True)
class TileSelection:
    """Rectangular block of picked tiles.

    A single picked tile is a 1x1 selection. Slots may be empty when the
    block extends past the tileset edge.
    """
    width: int = 1
    height: int = 1
    tiles: SelectionRows = ((None,),)

    def __post_init__(self) -> None:
        """Validate that the rows match the declared size."""
        object.__setattr__(self, "tiles", tuple(tuple(row) for row in self.tiles))
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid selection size: {self.width}x{self.height}")
        if len(self.tiles) != self.height or any(len(row) != self.width for row in self.tiles):
            raise ValueError(f"Selection tiles do not match size {self.width}x{self.height}")

    @classmethod
    def empty(cls) -> "TileSelection":
        return cls()

    @classmethod
    def single(cls, tile: Optional[TileRef]) -> "TileSelection":
        return cls(1, 1, ((tile,),))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Optional[TileRef]]]) -> "TileSelection":
        """Build a selection from rows of tiles; size is taken from the rows."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        return cls(width, height, tuple(tuple(row) for row in rows))

    @classmethod
    def from_tileset(
        cls, tileset: Tileset, col: int, row: int, width: int, height: int
    ) -> "TileSelection":
        """Pick a ``width`` x ``height`` block starting at (col, row) of a tileset.

        Slots outside the tileset grid are left empty.
        """
        rows = tuple(
            tuple(
                TileRef(tileset.id, col + dx, row + dy) if tileset.contains(col + dx, row + dy) else None
                for dx in range(width)
            )
            for dy in range(height)
        )
        return cls(width, height, rows)

    def first_tile(self) -> Optional[TileRef]:
        """Get the first non-empty tile in row-major order."""
        for row in self.tiles:
            for tile in row:
                if tile is not None:
                    return tile
        return None
