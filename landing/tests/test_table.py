import numpy as np
import pytest
from landing.engine.board_layout import load_board
from landing.engine.errors import ErrorCode, ProbabilityError
from landing.probability.table import ProbabilityTable, make_table


def standard_table():
    return ProbabilityTable.build(load_board(), depth=5)

def test_lookups_match_tensor():
    table = standard_table()
    assert table.depth == 5 and table.size == 43
    for stay in (False, True):
        row = table.distribution(0, 2, stay)
        assert table.get_probability(0, 24, 2, stay) == pytest.approx(row[24])
        assert table.get_steady_state(24, stay) == pytest.approx(table.steady_state_vector(stay)[24])

def test_first_turn_from_go():
    table = standard_table()
    # Go To Jail is never a resting place
    for stay in (False, True):
        assert table.get_probability(0, 30, 0, stay) > 0.0   # passed through
    P_row = table.distribution(0, 0, False)
    assert P_row[40] > 0.0   # jail via card, Go To Jail or three doubles

def test_bounds():
    table = standard_table()
    with pytest.raises(ProbabilityError) as exc:
        table.get_probability(0, 1, 5, False)
    assert exc.value.code == ErrorCode.ERR_TURN_OUT_OF_RANGE
    with pytest.raises(ProbabilityError) as exc:
        table.get_probability(-1, 1, 0, False)
    assert exc.value.code == ErrorCode.ERR_SPACE_OUT_OF_RANGE
    with pytest.raises(ProbabilityError):
        table.get_steady_state(43, True)
    with pytest.raises(ProbabilityError) as exc:
        make_table(load_board(), 0)
    assert exc.value.code == ErrorCode.ERR_INVALID_DEPTH

def test_table_is_read_only():
    table = standard_table()
    with pytest.raises(ValueError):
        table.probabilities[False][0, 0, 0] = 1.0
    with pytest.raises(ValueError):
        table.steady_state[True][0] = 1.0
    with pytest.raises(AttributeError):
        table.depth = 3
    with pytest.raises(TypeError):
        table.probabilities[False] = table.probabilities[True]
    with pytest.raises(TypeError):
        table.steady_state[False] = table.steady_state[True]
    assert table.get_steady_state(40, False) != table.get_steady_state(40, True)

def test_tables_compare_by_identity():
    table = standard_table()
    other = standard_table()
    assert table == table
    assert table != other

def test_steady_state_shape():
    table = standard_table()
    pay = table.steady_state_vector(False)
    # Illinois is visited far more than Mediterranean
    assert pay[24] > pay[1]
    # nobody rests on Go To Jail, it only collects pass-through mass
    assert pay[30] > 0.0
    top = table.most_visited(3, False)
    assert len(top) == 3
    assert top[0][2] >= top[1][2] >= top[2][2]
    assert all(space_id < 40 for space_id, _, _ in top)

def test_to_dict():
    table = standard_table()
    out = table.to_dict()
    assert out["depth"] == 5
    assert len(out["names"]) == 43 and out["names"][40] == "In Jail (turn 1)"
    assert np.array(out["probabilities"]["stay"]).shape == (5, 43, 43)
    assert len(out["steady_state"]["pay"]) == 43
