import pytest

from lagrange_keyboard.__main__ import build_parser, create_engine, main
from lagrange_keyboard.assembly import OUTPUTS, PART_NAMES, Assembly
from lagrange_keyboard.controller import ControllerMount
from lagrange_keyboard.engines.solid_engine import SolidEngine
from lagrange_keyboard.plates import KeyPlate
from lagrange_keyboard.threads import ThreadGenerator


@pytest.fixture
def assembly(config, engine) -> Assembly:
    return Assembly(config, engine)


def test_outputs():
    assert len(OUTPUTS) == 13
    for side in ('right', 'left'):
        for suffix in ('', '-cover', '-stand', '-boot', '-subassembly', '-assembly'):
            assert side + suffix in OUTPUTS
    assert all(set(spec.parts) <= set(PART_NAMES) for spec in OUTPUTS.values())


def test_header(assembly, config):
    assert assembly.header() == "$fa = 12;\n$fs = 2;\n"
    assert Assembly(config.replace(draft=False), assembly.engine).header() == "$fa = 3;\n$fs = 0.2;\n"


@pytest.mark.parametrize("name", ["right", "right-cover", "left-subassembly"])
def test_flat_parts(assembly, name):
    assert assembly.build(name) is not None


def test_left_side_is_mirrored(assembly):
    assert assembly.build('left').name == 'mirror'
    assert assembly.build('right').name == 'union'


def test_tented_parts(assembly):
    assert assembly.build('right-stand').name == 'translate'
    assert assembly.build('left-boot').name == 'translate'


def test_unknown_part(assembly):
    with pytest.raises(ValueError):
        assembly.build('keycaps')
    with pytest.raises(ValueError):
        assembly.assembly('right', ['lid'])


def test_case_test_build(config, engine):
    assembly = Assembly(config.replace(case_test_build=True, case_test_locations=[0, 1]), engine)
    assert assembly.build('right-subassembly').name == 'intersection'


def test_key_test_build(config, engine):
    assembly = Assembly(config.replace(key_test_build=True), engine)
    assert not assembly.grid.build_walls
    assert assembly.top() is not None


def test_export(assembly, tmp_path):
    paths = assembly.export('right-cover', assembly.build('right-cover'), tmp_path / "out")

    assert [path.name for path in paths] == ["right-cover.scad"]
    text = paths[0].read_text()
    assert text.count("$fa = 12;") == 1


def test_key_plates(placer, config, engine):
    plates = KeyPlate(placer)

    assert len(plates.plates()) == len(placer.grid.main_keys())
    assert len(plates.thumb_plates()) == len(placer.grid.thumb_keys())

    with_nubs = KeyPlate(type(placer)(config.replace(nub_sides=[0, 2]), engine))
    assert with_nubs.key_plate(placer.grid.main_keys()[0]).name == 'difference'


def test_controller(config, engine):
    controller = ControllerMount(config, engine, ThreadGenerator(config, engine))

    positions = controller.hole_positions()
    assert len(positions) == 4
    assert (4, 4, 0) in positions
    assert (30 - 4, 65 - 4, 0) in positions

    assert len(controller.bosses().children) == 4
    assert controller.pcb_place(True, controller.button_hole()).name == 'translate'
    assert controller.pcb_place(False, controller.connector_cutouts()).name == 'translate'


def test_engine_selection(config):
    assert isinstance(create_engine(config), SolidEngine)
    with pytest.raises(ValueError):
        create_engine(config.replace(engine='povray'))


def test_command_line(tmp_path):
    assert main(["--set", f"save_dir={tmp_path}", "--log-level", "WARNING", "right-cover"]) == 0
    assert (tmp_path / "right-cover.scad").exists()

    assert main(["--set", f"save_dir={tmp_path}", "no-such-part"]) == 1


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.config is None
    assert args.overrides == []
    assert args.parts == []
    assert args.log_level == "INFO"


@pytest.mark.parametrize("flag", ["key_test_build", "thumb_test_build"])
@pytest.mark.parametrize("name", ["right-cover", "right-stand"])
def test_test_builds_keep_the_case_outline(config, engine, flag, name):
    assembly = Assembly(config.replace(**{flag: True}), engine)
    assert assembly.build(name) is not None
