import argparse
from collections.abc import Iterable, Mapping
import json
import logging
import math
import pathlib
from typing import Any, Optional

shape_config = {
    'engine': 'solid',  # 'solid' or 'cadquery'
    'save_dir': 'things',

    ##############################
    # MAIN SECTION
    ##############################

    'row_count': 5,
    'column_count': 6,
    # Columns that also carry a key in the last row.  Negative values count from the last column.
    'full_height_columns': [2, 3, -1],

    # Radii, in mm, of the row arc and of each column arc.
    'row_radius': 235,
    'column_radius': [65, 65, 69, 66, 55, 55],

    # Spacing between rows, per column, and between successive columns, in mm.
    'row_spacing': [3.5, 3.5, 3.25, 3.25, 4.5, 4.5],
    'column_spacing': [2, 0, 4.5, 5, 3, 3],

    # Column and row rotations, in units of keys.
    'row_phase': -8,
    'column_phase': [-57 / 25 + delta for delta in (0, 0, -1 / 4, -1 / 8, -1 / 4, -1 / 4)],

    # Column offsets along Y and Z, in mm.
    'column_offset': [0, 0, 8, 0, -14, -14],
    'column_height': [0, 0, -5, 0, 7, 7],

    'last_column_scale': 1.5,
    'palm_key_offset': [0, -1, -3],
    'global_z_offset': 0,

    ##############################
    # KEY PLATES
    ##############################

    'keycap_length': 0.725 * 25.4,
    'plate_size': 0.725 * 25.4,
    'plate_thickness': 3,
    'plate_hole_size': 14,
    # Hole sides (0-3, counter-clockwise from -X) that get a nub engaging the switch tabs.
    'nub_sides': [],
    'nub_width': 1 / 3,
    'nub_height': 1.5,

    ##############################
    # THUMB SECTION
    ##############################

    'thumb_offset': [5, -12, 11],
    'thumb_radius': 68,
    'thumb_slant': 0.85,
    'thumb_key_scale': 1.25,

    ##############################
    # CASE
    ##############################

    'wall_thickness': 3.2,
    'screw_boss_radius': 5.5,
    'screw_boss_height': 8,

    'cover_thickness': 4,
    'cover_countersink_diameter': 4.5,
    'cover_countersink_height': 2.4,
    'cover_countersink_angle': math.radians(90),
    # Diameter, pitch and length of the cover fasteners, in mm.
    'cover_fastener_thread': [6.5, 0.75, 8],

    ##############################
    # STAND AND BOOT
    ##############################

    'stand_split_points': [16, 52],
    'stand_tenting_angle': math.radians(35),
    'stand_shape_factor': 0,  # 0 is radial extrusion, 1 is projection
    'stand_width': 12.5,
    # Thickness at the inner top, inner bottom and outer bottom.
    'stand_minimum_thickness': [1, 4, 0.4],
    'stand_cutout_position': 0.45,
    'stand_cutout_radius': [16, 10],
    'stand_cutout_depth': [-3 / 4, -5 / 8],
    'stand_boss_indexes': [0, 3, 1, 8],
    'stand_baseline_length': 61,

    # Offsets from the stand walls; their difference is the boot wall thickness.
    'boot_wall_thickness': [11 / 20, -5 / 20],
    'boot_wall_height': 2.5,
    'boot_bottom_thickness': 1.5,

    ##############################
    # CONTROLLER BOARD
    ##############################

    'pcb_position': [-108, 32.5, 11],
    'pcb_fastener_thread': [5, 0.5, 6],
    'pcb_size': [30, 65],
    'pcb_thickness': 1.6,
    # Radius and position of the board screw holes, measured from the board corner.
    'pcb_mount_hole': [1.5, 4, 4],
    'pcb_button_position': [4.6, 52.7],
    'pcb_button_diameter': 2.5,
    'pcb_6p6c_size': [16.64, 13.59, 16.51],
    'pcb_6p6c_position': [2.9, 17.4],
    'pcb_usb_size': [11.46, 12.03, 15.62],
    'pcb_usb_position': [7.8, 2.2],

    ##############################
    # BUILD
    ##############################

    'draft': True,
    'mock_threads': True,
    # $fa and $fs for draft and final builds.
    'draft_resolution': [12, 2],
    'final_resolution': [3, 0.2],
    'case_test_build': False,
    'case_test_locations': [0],
    'case_test_volume': [50, 50, 150, 0, 0, 0],
    'case_color': [0.70588, 0.69804, 0.67059],
    'thumb_test_build': False,
    'key_test_build': False,
    'key_test_range': [1, 2, 4, 4],
}

PER_COLUMN_KEYS = (
    'column_radius',
    'row_spacing',
    'column_spacing',
    'column_phase',
    'column_offset',
    'column_height',
)


class Configuration(Mapping):
    """
    Read-only view of a complete configuration.

    Values are reachable both as items and as attributes.  Use `replace` to derive a modified copy.
    """

    def __init__(self, values: Mapping):
        object.__setattr__(self, '_values', dict(values))

    def __getattr__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any):
        raise AttributeError("Configuration is read-only")

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Configuration({self._values!r})"

    def replace(self, **changes) -> "Configuration":
        unknown = set(changes) - set(self._values)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        values = dict(self._values)
        values.update(changes)
        return Configuration(values)

    @property
    def resolution(self) -> tuple:
        """
        The ($fa, $fs) pair in effect for this build.
        """
        fa, fs = self.draft_resolution if self.draft else self.final_resolution
        return fa, fs


def parse_override(text: str) -> tuple:
    """
    Split a `key=value` override.  The value is parsed as JSON where possible, and kept as a string otherwise.
    """
    key, separator, value = text.partition('=')
    key = key.strip()
    if not separator or not key:
        raise ValueError(f"Malformed override '{text}', expected key=value")

    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def _merge(values: dict, updates: Mapping, source: str):
    for key, item in updates.items():
        if key not in values:
            logging.warning("Ignoring unknown configuration key '%s' from %s", key, source)
            continue
        values[key] = item


def _validate(values: dict):
    count = values['column_count']
    for key in PER_COLUMN_KEYS:
        if len(values[key]) != count:
            raise ValueError(f"'{key}' needs one entry per column ({count}), got {len(values[key])}")

    if len(values['case_test_volume']) != 6:
        raise ValueError("'case_test_volume' needs a size and an offset (6 numbers)")


def load_configuration(path: Optional[pathlib.Path] = None,
                       overrides: Optional[Iterable[str]] = None) -> Configuration:
    logging.debug("load_configuration()")
    values = dict(shape_config)

    if path is None:
        logging.info("NO CONFIGURATION SPECIFIED, USING DEFAULT CONFIGURATION")
    else:
        with open(path, mode="rt", encoding="utf-8") as fid:
            _merge(values, json.load(fid), str(path))

    if overrides:
        _merge(values, dict(parse_override(item) for item in overrides), "the command line")

    _validate(values)
    return Configuration(values)


class GenerateConfigAction(argparse.Action):
    """
    Write the default configuration to the given path and exit
    """

    def __init__(self, option_strings, dest: str, **kwargs):
        kwargs.update({
            'type': pathlib.Path,
            'metavar': 'PATH',
            'help': "Write the default configuration as JSON to PATH and exit.",
        })
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser: argparse.ArgumentParser, namespace: argparse.Namespace, values: pathlib.Path, _option_string: Optional[str] = None):
        with open(values, mode="wt", encoding="utf-8") as fid:
            json.dump(shape_config, fid, indent=4)
        logging.info("Wrote default configuration to %s", values)
        parser.exit()
