"""Tests for the static evaluation and move-ordering scores."""

import pytest

from board_rules_interface import TrianglesGame
from evaluation import DECISIVE_THRESHOLD, WIN_WEIGHT, evaluate, score_move_for_ordering


@pytest.fixture
def game():
    return TrianglesGame(num_layers=3)


def claim(game, a, b, player):
    game.line_owner[game.topology.find_line(a, b)] = player


class TestEvaluate:
    def test_empty_board_is_even(self, game) -> None:
        assert evaluate(game, 1) == 0
        assert evaluate(game, 2) == 0

    def test_score_difference(self, game) -> None:
        game.scores[:] = (1, 3)
        assert evaluate(game, 2) == 2 * WIN_WEIGHT
        assert evaluate(game, 1) == -2 * WIN_WEIGHT

    def test_two_own_lines_in_a_triangle(self, game) -> None:
        # 0-1 and 0-2 only border the top triangle
        claim(game, 0, 1, 2)
        claim(game, 0, 2, 2)
        assert evaluate(game, 2) == 500
        assert evaluate(game, 1) == -500

    def test_single_line(self, game) -> None:
        claim(game, 3, 4, 1)
        assert evaluate(game, 2) == -50
        assert evaluate(game, 1) == 50

    def test_shared_line_counts_for_both_triangles(self, game) -> None:
        claim(game, 1, 2, 2)
        assert evaluate(game, 2) == 100

    def test_mixed_ownership_is_neutral(self, game) -> None:
        claim(game, 0, 1, 1)
        claim(game, 0, 2, 2)
        assert evaluate(game, 2) == 0

    def test_completed_triangles_are_ignored(self, game) -> None:
        for a, b in [(0, 1), (0, 2), (1, 2)]:
            claim(game, a, b, 2)
        game.triangle_owner[0] = 2
        game.scores[:] = (0, 1)
        # Only the lower triangle sharing 1-2 still counts, with a single line
        assert evaluate(game, 2) == WIN_WEIGHT + 50

    def test_decisive_score_skips_positional_terms(self) -> None:
        game = TrianglesGame(num_layers=5)
        game.line_owner[0] = 1
        game.scores[:] = (0, 6)
        assert evaluate(game, 2) == 6 * WIN_WEIGHT
        assert evaluate(game, 1) == -6 * WIN_WEIGHT

    def test_threshold_itself_is_not_decisive(self) -> None:
        game = TrianglesGame(num_layers=5)
        game.line_owner[game.topology.find_line(0, 1)] = 2
        game.scores[:] = (0, 5)
        assert 5 * WIN_WEIGHT == DECISIVE_THRESHOLD
        assert evaluate(game, 2) == DECISIVE_THRESHOLD + 50


class TestMoveOrdering:
    def test_empty_board(self, game) -> None:
        assert all(score_move_for_ordering(game, m) == 0 for m in game.get_valid_moves())

    def test_sets_up_triangle(self, game) -> None:
        claim(game, 0, 1, 1)
        assert score_move_for_ordering(game, game.topology.find_line(1, 2)) == 100
        assert score_move_for_ordering(game, game.topology.find_line(3, 4)) == 0

    def test_completes_triangle(self, game) -> None:
        claim(game, 0, 1, 1)
        claim(game, 0, 2, 2)
        assert score_move_for_ordering(game, game.topology.find_line(1, 2)) == 1000

    def test_completes_one_and_sets_up_another(self, game) -> None:
        claim(game, 0, 1, 1)
        claim(game, 0, 2, 2)
        claim(game, 2, 4, 1)
        assert score_move_for_ordering(game, game.topology.find_line(1, 2)) == 1100

    def test_ignores_completed_triangles(self, game) -> None:
        claim(game, 0, 1, 1)
        claim(game, 0, 2, 1)
        game.triangle_owner[0] = 1
        assert score_move_for_ordering(game, game.topology.find_line(1, 2)) == 0
