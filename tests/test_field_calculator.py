"""
场矢量计算器与点电荷模型测试
"""

import numpy as np
import pytest

from core.field_calculator import FieldCalculator
from physics.point import PointCharge, Sign


class TestPointCharge:
    """点电荷模型测试"""

    def test_inverse_square_with_distance_scale(self):
        """d = |r| / 100，场强 = m / d²"""
        charge = PointCharge(id=0, sign=Sign.POSITIVE, magnitude=2.0, position=(0, 0))
        assert np.allclose(charge.electric_field([100.0, 0.0]), [2.0, 0.0])
        assert np.allclose(charge.electric_field([0.0, 200.0]), [0.0, 0.5])

    def test_negative_sign_points_inward(self):
        charge = PointCharge(id=0, sign=Sign.NEGATIVE, magnitude=1.0, position=(0, 0))
        assert np.allclose(charge.electric_field([100.0, 0.0]), [-1.0, 0.0])

    def test_batch_points(self):
        charge = PointCharge(id=0, sign=Sign.POSITIVE, magnitude=1.0, position=(0, 0))
        E = charge.electric_field([[100.0, 0.0], [0.0, 100.0]])
        assert E.shape == (2, 2)

    def test_signed_magnitude(self):
        charge = PointCharge(id=3, sign=Sign.NEGATIVE, magnitude=4.0, position=(0, 0))
        assert charge.signed_magnitude == -4.0

    def test_moved_keeps_id(self):
        charge = PointCharge(id=7, sign=Sign.POSITIVE, magnitude=1.0, position=(10, 20))
        moved = charge.moved((5, -5))
        assert moved.id == 7
        assert np.allclose(moved.position, [15, 15])
        assert np.allclose(charge.position, [10, 20])

    @pytest.mark.parametrize("magnitude", [0.5, 20.5, -1.0])
    def test_magnitude_out_of_range_rejected(self, magnitude):
        with pytest.raises(ValueError):
            PointCharge(id=0, sign=Sign.POSITIVE, magnitude=magnitude, position=(0, 0))

    def test_non_positive_radius_rejected(self):
        with pytest.raises(ValueError):
            PointCharge(id=0, sign=Sign.POSITIVE, magnitude=1.0, position=(0, 0), radius=0.0)

    def test_position_must_be_2d(self):
        with pytest.raises(ValueError):
            PointCharge(id=0, sign=Sign.POSITIVE, magnitude=1.0, position=(0, 0, 0))

    def test_sign_flip(self):
        assert Sign.POSITIVE.flipped() is Sign.NEGATIVE
        assert Sign.NEGATIVE.flipped() is Sign.POSITIVE

    def test_equality_is_identity(self):
        a = PointCharge(id=0, sign=Sign.POSITIVE, magnitude=1.0, position=(0, 0))
        b = PointCharge(id=0, sign=Sign.POSITIVE, magnitude=1.0, position=(0, 0))
        assert a == a
        assert a != b
        assert a != a.moved([10.0, 0.0])
        assert len({a, b}) == 2


class TestFieldCalculator:
    """叠加计算测试"""

    def test_superposition_matches_sum(self, dipole_charges):
        calc = FieldCalculator(dipole_charges)
        point = np.array([650.0, 320.0])
        expected = sum(c.electric_field(point) for c in dipole_charges)
        assert np.allclose(calc.electric_field(point), expected)

    def test_symmetric_cancellation(self):
        charges = [
            PointCharge(id=0, sign=Sign.POSITIVE, magnitude=1.0, position=(100, 200)),
            PointCharge(id=1, sign=Sign.POSITIVE, magnitude=1.0, position=(300, 200)),
        ]
        calc = FieldCalculator(charges)
        assert np.allclose(calc.electric_field([200.0, 200.0]), [0.0, 0.0])
        assert calc.field_direction([200.0, 200.0]) is None

    def test_direction_is_unit(self, dipole_charges):
        calc = FieldCalculator(dipole_charges)
        direction = calc.field_direction([620.0, 300.0])
        assert np.isclose(np.linalg.norm(direction), 1.0)

    def test_degenerate_at_charge_center(self, dipole_charges):
        """电荷中心处不做特殊处理，方向归一化返回None"""
        calc = FieldCalculator(dipole_charges)
        assert not np.all(np.isfinite(calc.electric_field([600.0, 250.0])))
        assert calc.field_direction([600.0, 250.0]) is None

    def test_no_charges(self):
        calc = FieldCalculator()
        assert np.allclose(calc.electric_field([1.0, 2.0]), [0.0, 0.0])
        assert calc.field_direction([1.0, 2.0]) is None
