from enum import Enum
import logging
from typing import NamedTuple

from .generate_configuration import Configuration


class Section(Enum):
    MAIN = 'main'
    THUMB = 'thumb'


class GridCoordinate(NamedTuple):
    section: Section
    column: int
    row: int


# Keys of the thumb cluster, per row.
THUMB_COLUMNS = {
    0: (0, 1, 2, 3),
    1: (0, 1, 2),
    2: (1,),
}


class TopologyGrid:
    """
    Decides which grid coordinates carry a key.

    Main section bounds shrink to `key_test_range` for thumb and key test builds.  Everything that
    references a key goes through `exists` first.
    """

    def __init__(self, config: Configuration):
        self.row_count = config.row_count
        self.column_count = config.column_count

        if config.thumb_test_build or config.key_test_build:
            first_column, first_row, last_column, last_row = config.key_test_range
            self.columns = range(max(0, first_column), min(self.column_count, last_column + 1))
            self.rows = range(max(0, first_row), min(self.row_count, last_row + 1))
        else:
            self.columns = range(self.column_count)
            self.rows = range(self.row_count)

        # The case outline always follows the whole layout, whatever subset of keys is built.
        self.layout_columns = range(self.column_count)
        self.layout_rows = range(self.row_count)

        self.full_height_columns = frozenset(self.column(i) for i in config.full_height_columns)
        self.build_thumb = config.thumb_test_build or not config.key_test_build
        self.build_walls = not (config.thumb_test_build or config.key_test_build)

    @property
    def last_column(self) -> int:
        return self.column_count - 1

    @property
    def last_row(self) -> int:
        return self.row_count - 1

    def column(self, i: int) -> int:
        return i + self.column_count if i < 0 else i

    def row(self, j: int) -> int:
        return j + self.row_count if j < 0 else j

    def resolve(self, coordinate: GridCoordinate) -> GridCoordinate:
        """
        Resolve negative indices of a main section coordinate.  Thumb coordinates are returned as is.
        """
        if coordinate.section is Section.THUMB:
            return coordinate
        return GridCoordinate(coordinate.section, self.column(coordinate.column), self.row(coordinate.row))

    def exists(self, coordinate: GridCoordinate) -> bool:
        if coordinate.section is Section.THUMB:
            return coordinate.column in THUMB_COLUMNS.get(coordinate.row, ())

        _, i, j = self.resolve(coordinate)
        return i in self.columns and j in self.rows and self.in_layout(i, j)

    def main_exists(self, i: int, j: int) -> bool:
        return self.exists(GridCoordinate(Section.MAIN, i, j))

    def in_layout(self, i: int, j: int) -> bool:
        """
        Whether the full layout has a key at (i, j), ignoring test build bounds.
        """
        i, j = self.column(i), self.row(j)
        return (
            i in self.layout_columns
            and j in self.layout_rows
            and (i in self.full_height_columns or j < self.last_row)
        )

    def main_keys(self) -> list:
        logging.debug("main_keys()")
        return [GridCoordinate(Section.MAIN, i, j)
                for i in self.columns for j in self.rows
                if self.main_exists(i, j)]

    def thumb_keys(self) -> list:
        logging.debug("thumb_keys()")
        return [GridCoordinate(Section.THUMB, i, j)
                for j, columns in THUMB_COLUMNS.items() for i in columns]

    def is_palm_key(self, coordinate: GridCoordinate) -> bool:
        coordinate = self.resolve(coordinate)
        return (coordinate.section is Section.MAIN
                and (coordinate.column, coordinate.row) == (self.last_column, self.last_row))
