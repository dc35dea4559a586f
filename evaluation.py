#evaluation.py
import numpy as np

WIN_WEIGHT = 1000
DECISIVE_THRESHOLD = 5000
NEAR_COMPLETION_WEIGHT = 500
SINGLE_CLAIM_WEIGHT = 50

COMPLETES_TRIANGLE_BONUS = 1000
SETS_UP_TRIANGLE_BONUS = 100


def evaluate(game_state, player) -> int:
    """
    Static score of a position from `player`'s point of view.

    Parameters:
        game_state (TrianglesGame): The position to score.
        player (int): The player the score is computed for (the computer).

    Returns:
        int: (own score - opponent score) * WIN_WEIGHT, plus, when the game is
        not already decided, a bonus or malus for every incomplete triangle
        with one or two lines held by a single player.
    """
    my_index = player - 1
    base = int(game_state.scores[my_index] - game_state.scores[1 - my_index]) * WIN_WEIGHT
    if abs(base) > DECISIVE_THRESHOLD:
        return base

    topology = game_state.topology
    incomplete = game_state.triangle_owner == 0
    owners = game_state.line_owner[topology.triangle_lines[incomplete]]

    mine = np.count_nonzero(owners == player, axis=1)
    theirs = np.count_nonzero(owners == 3 - player, axis=1)
    claimed = mine + theirs

    near = claimed == 2
    single = claimed == 1
    positional = (NEAR_COMPLETION_WEIGHT * (np.count_nonzero(near & (mine == 2)) - np.count_nonzero(near & (theirs == 2)))
                  + SINGLE_CLAIM_WEIGHT * (np.count_nonzero(single & (mine == 1)) - np.count_nonzero(single & (theirs == 1))))
    return base + int(positional)


def value_bounds(game_state, player):
    """
    Lowest and highest value `evaluate` can return for any position reachable
    from `game_state`, from `player`'s point of view.

    Every incomplete triangle can still swing the score by one point, and the
    positional terms never exceed NEAR_COMPLETION_WEIGHT per triangle.
    """
    my_index = player - 1
    lead = int(game_state.scores[my_index] - game_state.scores[1 - my_index])
    remaining = int(np.count_nonzero(game_state.triangle_owner == 0))
    positional = DECISIVE_THRESHOLD + NEAR_COMPLETION_WEIGHT * remaining
    return (min((lead - remaining) * WIN_WEIGHT, -positional),
            max((lead + remaining) * WIN_WEIGHT, positional))


def score_move_for_ordering(game_state, line_id) -> int:
    """Cheap pre-score used to try promising lines first. Not a position value."""
    topology = game_state.topology
    score = 0
    for triangle_id in topology.line_triangles[line_id]:
        if game_state.triangle_owner[triangle_id]:
            continue
        others_claimed = np.count_nonzero(game_state.line_owner[topology.triangle_lines[triangle_id]])
        if others_claimed == 2:
            score += COMPLETES_TRIANGLE_BONUS
        elif others_claimed == 1:
            score += SETS_UP_TRIANGLE_BONUS
    return score

