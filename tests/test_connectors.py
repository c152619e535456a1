from collections import Counter

import pytest

from lagrange_keyboard.connectors import ConnectorSynthesizer, K, T, thumb_cluster_groups
from lagrange_keyboard.placement import KeyPlacer
from lagrange_keyboard.topology import GridCoordinate, Section


@pytest.fixture
def synthesizer(placer) -> ConnectorSynthesizer:
    return ConnectorSynthesizer(placer)


def origins(groups, kind) -> Counter:
    return Counter(group.origin for group in groups if group.kind == kind)


def test_every_column_neighbor_gets_one_group(synthesizer):
    grid = synthesizer.grid
    expected = {
        (i, j) for i in grid.columns for j in grid.rows
        if grid.main_exists(i, j) and grid.main_exists(i, j + 1)
    }

    found = origins(synthesizer.main_groups(), 'column')
    assert set(found) == expected
    assert all(count == 1 for count in found.values())


def test_every_row_neighbor_gets_one_group(synthesizer):
    grid = synthesizer.grid

    def shift(i, j):
        return j + 1 if i == 1 else j

    expected = {
        (i, j) for i in grid.columns for j in grid.rows
        if grid.main_exists(i, j) and grid.main_exists(i + 1, j) and grid.main_exists(i + 1, shift(i, j))
    } - {(1, 3)}

    found = origins(synthesizer.main_groups(), 'row')
    assert set(found) == expected
    assert all(count == 1 for count in found.values())


def test_diagonals_skip_the_hand_authored_corner(synthesizer):
    found = origins(synthesizer.main_groups(), 'diagonal')

    assert (1, 2) not in found
    assert (0, 0) in found
    assert all(count == 1 for count in found.values())


def test_groups_only_reference_existing_keys(synthesizer):
    grid = synthesizer.grid
    for group in synthesizer.main_groups() + synthesizer.thumb_groups():
        for kernel in group.kernels:
            assert grid.exists(kernel.coordinate), group
            # Negative indices are resolved when the group is admitted.
            if kernel.section is Section.MAIN:
                assert kernel.column >= 0 and kernel.row >= 0


def test_seam_groups(synthesizer):
    kinds = Counter(group.kind for group in synthesizer.main_groups())
    assert kinds['seam'] == 3
    assert kinds['palm'] == 1


def test_thumb_groups(synthesizer):
    groups = synthesizer.thumb_groups()
    assert len(groups) == len(thumb_cluster_groups(0, 0)) == 10


def test_thumb_seam_requires_its_main_key(config, engine):
    placer = KeyPlacer(config.replace(key_test_build=True, key_test_range=[1, 0, 5, 4]), engine)
    synthesizer = ConnectorSynthesizer(placer)

    # Main key (0, -2) is outside the test range.
    assert not placer.grid.main_exists(0, -2)
    groups = synthesizer.thumb_groups()
    assert len(groups) == 9
    assert not any(kernel.section is Section.MAIN and kernel.column == 0
                   for group in groups for kernel in group.kernels)


def test_kernel_refs():
    assert K(1, 2, -1, 1).coordinate == GridCoordinate(Section.MAIN, 1, 2)
    assert T(0, 1, 1, -1, 2).z == 2


def test_connectors_are_computed_once(synthesizer):
    assert not synthesizer._connectors.realized
    connectors = synthesizer.connectors()
    assert synthesizer._connectors.realized

    assert len(connectors) == len(synthesizer.main_groups())
    assert synthesizer.connectors() is connectors
    assert len(synthesizer.thumb_connectors()) == len(synthesizer.thumb_groups())


def test_triangle_hulls(synthesizer, engine):
    shapes = [engine.box(1, 1, 1) for _ in range(5)]
    hulls = synthesizer.triangle_hulls(shapes)
    assert len(hulls.children) == 3
