"""Cross-section tables and reaction lists."""

import pytest

from scatter_mc.config import CollisionTermConfig
from scatter_mc.physics.cross_sections import CrossSections
from scatter_mc.transport.dump import cm_momenta, dump_cross_sections, dump_reactions


@pytest.fixture
def default_xs(catalog):
    return CrossSections(catalog, CollisionTermConfig())


def _columns(text):
    return text.splitlines()[1].split()


def test_default_momenta():
    momenta = cm_momenta(0.938, 0.938)
    assert len(momenta) == 200
    assert momenta[0] == pytest.approx(0.02)
    assert momenta[-1] == pytest.approx(4.0)


def test_plab_deduplicated():
    assert len(cm_momenta(0.138, 0.938, [1.0, 0.5, 1.0])) == 2


def test_partial_table_layout(catalog, default_xs):
    pip, p = catalog['pi+'], catalog['p']
    text = dump_cross_sections(default_xs, pip, p, pip.mass, p.mass, plab=[0.3, 0.5, 0.5])
    lines = text.splitlines()

    assert lines[0] == "# Dumping partial pi+p cross-sections in mb, energies in GeV"
    assert lines[1].startswith("   sqrt_s")
    columns = _columns(text)
    assert columns[:3] == ['sqrt_s', 'total', 'pi+p']
    assert 'Delta++' in columns

    rows = lines[2:]
    assert len(rows) == 2
    for row in rows:
        assert len(row) == 9 + 16 * (len(columns) - 1)
        values = [float(v) for v in row.split()]
        # total equals the sum of the partial columns
        assert values[1] == pytest.approx(sum(values[2:]), abs=1e-5)


def test_final_state_table(catalog, default_xs):
    pip, p = catalog['pi+'], catalog['p']
    text = dump_cross_sections(default_xs, pip, p, pip.mass, p.mass,
                               final_state=True, plab=[0.3, 1.0])
    assert _columns(text) == ['sqrt_s', 'total', 'ppi+']
    for row in text.splitlines()[2:]:
        _, total, exclusive = (float(v) for v in row.split())
        assert exclusive == pytest.approx(total, abs=1e-5)


def test_string_columns_are_skipped(catalog, default_xs):
    p = catalog['p']
    text = dump_cross_sections(default_xs, p, p, p.mass, p.mass,
                               final_state=True, plab=[20.0])
    columns = _columns(text)
    assert '' not in columns
    assert columns[1] == 'total'
    row = [float(v) for v in text.splitlines()[2].split()]
    # strings carry the remainder of the 40 mb total, leaving a gap
    assert sum(row[2:]) < row[1]


def test_zero_columns_dropped(catalog):
    config = CollisionTermConfig(elastic_cross_section=-1.0, included_2to2=['Elastic'],
                                 two_to_one=False, strings=False)
    xs = CrossSections(catalog, config)
    p = catalog['p']
    # Below the NN elastic cutoff every column, the total included, vanishes
    text = dump_cross_sections(xs, p, p, p.mass, p.mass, plab=[0.1, 0.2])
    assert _columns(text) == ['sqrt_s']
    assert all(len(row) == 9 for row in text.splitlines()[2:])


def test_dump_reactions(default_xs):
    text = dump_reactions(default_xs)
    lines = text.splitlines()
    n_types = len(default_xs.catalog)
    assert lines[0] == f"{n_types} particle types."
    assert "pi+p → pi+p (el)" in text
    assert "pp → nDelta++ (inel)" in text
    assert "pp → strings" in text
    for line in lines[2:]:
        reactions = line.split(', ')
        assert reactions == sorted(set(reactions))
