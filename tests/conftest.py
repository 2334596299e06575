"""
共享测试夹具
"""

import pytest

from physics.point import PointCharge, Sign


@pytest.fixture
def fast_settings():
    """小密度、短步数的默认参数，保证引擎测试足够快"""
    return {
        'magnitude': 1.0,
        'radius': 10.0,
        'density': 4,
        'steps': 200,
        'step_length': 2.0,
    }


@pytest.fixture
def dipole_charges():
    """竖直排列的一对异号电荷"""
    return [
        PointCharge(id=0, sign=Sign.POSITIVE, magnitude=1.0, position=(600, 250), radius=10.0),
        PointCharge(id=1, sign=Sign.NEGATIVE, magnitude=1.0, position=(600, 500), radius=10.0),
    ]
