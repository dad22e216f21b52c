"""Shared fixtures for tilemaped tests."""

from pathlib import Path
from typing import Callable

import orjson
import pytest
from PIL import Image

from tilemaped.editor import EditorSession
from tilemaped.maps.models import TileMap, TileRef
from tilemaped.settings import AppSettings
from tilemaped.tilesets import Tileset, TilesetCatalog

TILE_PX = 8
SHEET_COLS = 4
SHEET_ROWS = 2


def sheet_color(col: int, row: int) -> tuple[int, int, int, int]:
    """Solid colour used for the generated sheet tile at (col, row)."""
    return (40 * col + 20, 100 * row + 50, 200, 255)


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    """Settings stored in a throwaway INI file."""
    return AppSettings(profile="test", storage_path=tmp_path / "settings.ini")


@pytest.fixture
def sheet_path(tmp_path: Path) -> Path:
    """A 4x2 tileset image of 8px tiles, each tile a distinct solid colour."""
    image = Image.new("RGBA", (SHEET_COLS * TILE_PX, SHEET_ROWS * TILE_PX))
    for row in range(SHEET_ROWS):
        for col in range(SHEET_COLS):
            tile = Image.new("RGBA", (TILE_PX, TILE_PX), sheet_color(col, row))
            image.paste(tile, (col * TILE_PX, row * TILE_PX))
    path = tmp_path / "sheets" / "terrain.png"
    path.parent.mkdir(parents=True)
    image.save(path)
    return path


@pytest.fixture
def tileset() -> Tileset:
    return Tileset(
        id=1,
        name="Terrain",
        image_url="sheets/terrain.png",
        tile_width=TILE_PX,
        tile_height=TILE_PX,
        grid_width=SHEET_COLS,
        grid_height=SHEET_ROWS,
    )


@pytest.fixture
def catalog_path(tmp_path: Path, sheet_path: Path, tileset: Tileset) -> Path:
    """Catalog JSON listing the generated tileset by relative image path."""
    path = tmp_path / "catalog.json"
    path.write_bytes(orjson.dumps([tileset.to_dict()]))
    return path


@pytest.fixture
def catalog(catalog_path: Path) -> TilesetCatalog:
    return TilesetCatalog.from_file(catalog_path)


@pytest.fixture
def grass() -> TileRef:
    return TileRef(1, 0, 0)


@pytest.fixture
def water() -> TileRef:
    return TileRef(1, 2, 3)


@pytest.fixture
def session() -> EditorSession:
    """Session on an empty 5x5 grid map with 8px tiles."""
    return EditorSession(TileMap.create("grid", tile_size=TILE_PX, width=5, height=5))


@pytest.fixture
def tile_color() -> Callable[[int, int], tuple[int, int, int, int]]:
    """Colour lookup for tiles of the generated sheet."""
    return sheet_color
