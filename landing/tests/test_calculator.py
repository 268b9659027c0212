import numpy as np
import pytest
from landing.engine.board_layout import BoardModel, load_board
from landing.engine.errors import ErrorCode, ProbabilityError
from landing.probability.calculator import TransitionMatrixBuilder


def standard_builder():
    return TransitionMatrixBuilder(load_board())

def plain_model(max_doubles=3):
    spaces = [{"name": f"S{i}", "type": "property"} for i in range(40)]
    spaces[10] = {"name": "Just Visiting", "type": "just_visiting"}
    return BoardModel.from_dict({"spaces": spaces, "decks": {}, "jail": {"just_visiting": 10, "max_turns": 3},
                                 "dice": {"count": 2, "sides": 6, "max_doubles": max_doubles}})

def test_rows_sum_to_one():
    standard = standard_builder()
    for stay in (False, True):
        P = standard.transition_matrix(stay)
        assert P.shape == (43, 43)
        np.testing.assert_allclose(P.sum(axis=1), 1.0, atol=1e-12)
        assert (standard.mid_matrix(stay) >= 0).all()

def test_first_turn_is_end_plus_mid():
    standard = standard_builder()
    for stay in (False, True):
        T = standard.get_tensor(4, stay)
        assert T.shape == (4, 43, 43)
        np.testing.assert_allclose(T[0], standard.transition_matrix(stay) + standard.mid_matrix(stay))

def test_later_turns_iterate_products():
    standard = standard_builder()
    P = standard.transition_matrix(True); M = standard.mid_matrix(True)
    T = standard.get_tensor(3, True)
    np.testing.assert_allclose(T[1], P @ P + P @ M)
    np.testing.assert_allclose(T[2], P @ P @ P + P @ P @ M)

def test_steady_state_fixed_point():
    standard = standard_builder()
    for stay in (False, True):
        pi = standard.stationary(stay)
        P = standard.transition_matrix(stay)
        assert pi.sum() == pytest.approx(1.0)
        np.testing.assert_allclose(pi, pi @ P, atol=1e-10)
        occupancy = standard.get_steady_state(stay)
        np.testing.assert_allclose(occupancy, pi + pi @ standard.mid_matrix(stay))
        assert standard.residuals[stay] < 1e-9

def test_rebuild_is_deterministic():
    standard = standard_builder()
    again = TransitionMatrixBuilder(load_board())
    for stay in (False, True):
        assert np.array_equal(again.transition_matrix(stay), standard.transition_matrix(stay))
        assert np.array_equal(again.mid_matrix(stay), standard.mid_matrix(stay))
        assert np.array_equal(again.get_steady_state(stay), standard.get_steady_state(stay))

def test_seven_from_start_single_roll():
    calc = TransitionMatrixBuilder(plain_model(max_doubles=1))
    for start in (0, 15, 36):
        assert calc.transition_matrix(False)[start, (start + 7) % 40] == pytest.approx(6 / 36)

def test_seven_from_start_with_doubles_chains():
    calc = TransitionMatrixBuilder(plain_model())
    # straight 7, or doubles (2 or 4) then the rest, or 2+2 then 3
    expected = 6 / 36 + 4 / 36 ** 2 + 2 / 36 ** 2 + 2 / 36 ** 3
    assert calc.transition_matrix(False)[0, 7] == pytest.approx(expected)
    assert calc.get_tensor(1, False)[0, 0, 7] == pytest.approx(expected)

def test_unreachable_jail_cells_when_paying():
    standard = standard_builder()
    pi = standard.stationary(False)
    assert pi[41] == pytest.approx(0.0, abs=1e-12)
    assert pi[42] == pytest.approx(0.0, abs=1e-12)
    assert standard.stationary(True)[40:].sum() > pi[40:].sum()

def test_singular_system_is_fatal():
    standard = standard_builder()
    with pytest.raises(ProbabilityError) as exc:
        standard.solve_steady_state(np.eye(3))
    assert exc.value.code == ErrorCode.ERR_SINGULAR_SYSTEM

def test_invalid_depth():
    standard = standard_builder()
    with pytest.raises(ProbabilityError) as exc:
        standard.get_tensor(0, False)
    assert exc.value.code == ErrorCode.ERR_INVALID_DEPTH

def test_zero_tolerance_is_floored():
    calc = TransitionMatrixBuilder(load_board(), tolerance=0.0)
    assert calc.tolerance > 0.0
    np.testing.assert_allclose(calc.transition_matrix(False).sum(axis=1), 1.0, atol=1e-12)

def test_unreachable_states_never_negative():
    spaces = [{"name": "A", "type": "just_visiting"}, {"name": "B", "type": "property"}]
    model = BoardModel.from_dict({"spaces": spaces, "decks": {}, "jail": {"just_visiting": 0, "max_turns": 3},
                                  "dice": {"count": 1, "sides": 2, "max_doubles": 3}})
    calc = TransitionMatrixBuilder(model)
    for stay in (False, True):
        pi = calc.stationary(stay)
        assert (pi >= 0.0).all()
        assert (calc.get_steady_state(stay) >= 0.0).all()
        assert pi[:2] == pytest.approx([0.5, 0.5])
        assert pi[2:].sum() == pytest.approx(0.0, abs=1e-12)
