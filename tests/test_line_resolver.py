"""
重复场线消除测试
"""

from core.line_resolver import (
    count_terminations,
    compute_removal_sets,
    resolve_duplicate_lines,
)
from tests.helpers import make_field, terminations_of


class TestDuplicateLineResolver:
    """互相终止的线束只保留一侧"""

    def test_tie_removes_first_charge_side(self):
        fields = [make_field(0, [1, 1, None]), make_field(1, [0, 0])]
        result = terminations_of(resolve_duplicate_lines(fields))

        assert result[0] == [None]
        assert result[1] == [0, 0]

    def test_majority_side_is_kept(self):
        fields = [make_field(0, [1, 1, 1]), make_field(1, [0, None])]
        result = terminations_of(resolve_duplicate_lines(fields))

        assert result[0] == [1, 1, 1]
        assert result[1] == [None]

    def test_second_charge_majority_removes_first(self):
        fields = [make_field(0, [1]), make_field(1, [0, 0, 0])]
        result = terminations_of(resolve_duplicate_lines(fields))

        assert result[0] == []
        assert result[1] == [0, 0, 0]

    def test_removal_sets_are_unioned(self):
        fields = [
            make_field(0, [1, 2, None]),
            make_field(1, [0, 0]),
            make_field(2, [0, 0]),
        ]
        removal = compute_removal_sets(fields)
        assert removal[0] == {1, 2}

        result = terminations_of(resolve_duplicate_lines(fields))
        assert result[0] == [None]
        assert result[1] == [0, 0]
        assert result[2] == [0, 0]

    def test_one_way_lines_untouched(self):
        """只有一侧有线时，多数侧正是有线的一侧"""
        fields = [make_field(0, [1, 1]), make_field(1, [None])]
        result = terminations_of(resolve_duplicate_lines(fields))
        assert result[0] == [1, 1]

    def test_pair_without_lines_skipped(self):
        fields = [make_field(0, [None]), make_field(1, [None])]
        assert compute_removal_sets(fields) == {0: set(), 1: set()}

    def test_idempotent(self):
        fields = [
            make_field(0, [1, 1, 2, None]),
            make_field(1, [0, 0, 2]),
            make_field(2, [0, 1, 1, 1]),
        ]
        once = resolve_duplicate_lines(fields)
        twice = resolve_duplicate_lines(once)
        assert terminations_of(once) == terminations_of(twice)

    def test_order_preserved_and_input_untouched(self):
        fields = [make_field(3, [4]), make_field(4, [3])]
        result = resolve_duplicate_lines(fields)

        assert [f.charge_id for f in result] == [3, 4]
        assert terminations_of(fields) == {3: [4], 4: [3]}

    def test_count_terminations(self):
        counts = count_terminations([make_field(0, [1, 1, None, 2]), make_field(1, [])])
        assert counts[0][1] == 2
        assert counts[0][2] == 1
        assert counts[1][0] == 0
