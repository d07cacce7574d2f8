#!/usr/bin/env python3

import numpy as np
import pytest

from ternmera import TrivialSpace, U1_Space, get_vector_space_type
from ternmera.vector_space import allowed_mask, combine_spaces


def test_trivial_space():
    V = TrivialSpace(3)
    assert V.dim == 3
    assert V.symmetry() == "trivial"
    assert (V.representation == np.array([3])).all()
    assert V.dual() != V
    assert V.dual().dual() == V
    assert V.dual().dim == 3
    assert V == TrivialSpace(np.array([3]))
    assert V != TrivialSpace(4)
    assert V.sectors() == {0: 3}

    V5 = V.expand(5)
    assert V5 == TrivialSpace(5)
    assert V.expand({0: 6}).dim == 6
    assert V.dual().expand(4) == TrivialSpace(4).dual()
    assert V.expand(3) == V
    with pytest.raises(ValueError):
        V.expand(2)
    with pytest.raises(ValueError):
        TrivialSpace(0)


def test_u1_space():
    V = U1_Space(np.array([1, -1, 1], dtype=np.int8))
    assert V.dim == 3
    assert V.symmetry() == "U1"
    assert V.sectors() == {-1: 1, 1: 2}
    assert V.dual().dual() == V
    assert V.dual() != V
    assert (V.dual().leg_representation() == -V.representation).all()
    assert V != U1_Space(np.array([1, 1, -1], dtype=np.int8))

    # new states are appended, existing ones keep their position
    V2 = V.expand({1: 3, 3: 1})
    assert V2.dim == 5
    assert V2.sectors() == {-1: 1, 1: 3, 3: 1}
    assert (V2.representation[:3] == V.representation).all()
    assert V.expand({-1: 1}) == V
    with pytest.raises(ValueError):
        V.expand({1: 1})
    with pytest.raises(ValueError):
        V.expand(5)


def test_combine_spaces():
    V = U1_Space(np.array([1, -1], dtype=np.int8))
    assert (combine_spaces((V, V)) == np.array([2, 0, 0, -2])).all()
    assert (combine_spaces((V, V.dual())) == np.array([0, 2, -2, 0])).all()
    assert (combine_spaces((V.dual(),)) == np.array([-1, 1])).all()

    # a disentangler can only mix states with same total charge
    mask = allowed_mask((V, V, V.dual(), V.dual())).reshape(4, 4)
    expected = np.array(
        [
            [True, False, False, False],
            [False, True, True, False],
            [False, True, True, False],
            [False, False, False, True],
        ]
    )
    assert (mask == expected).all()

    T = TrivialSpace(2)
    assert allowed_mask((T, T.dual(), T)).all()
    assert allowed_mask((T, T.dual(), T)).shape == (2, 2, 2)
    with pytest.raises(ValueError):
        combine_spaces((T, V))


def test_vector_space_types():
    assert get_vector_space_type("trivial") is TrivialSpace
    assert get_vector_space_type("U1") is U1_Space
    with pytest.raises(RuntimeError):
        get_vector_space_type("SU2")
