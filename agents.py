# agents.py
import asyncio
import logging
import math
import random
import time

from errors import InvalidConfiguration, SearchExhausted
from evaluation import evaluate, score_move_for_ordering, value_bounds
from transposition_table import FLAG_EXACT, FLAG_LOWERBOUND, FLAG_UPPERBOUND, TranspositionTable

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 3


class Agent:
    """
    Abstract base class for all agents.
    """
    def get_move(self, game_state):
        """
        Determine the next move.
        Must be overridden by subclasses.

        Parameters:
            game_state (TrianglesGame): The current state of the game.

        Returns:
            tuple: A tuple (line_id, elapsed time, depth) or (None, None, None).
        """
        raise NotImplementedError("This method should be overridden by subclasses.")

    def choose_move(self, game_state):
        return self.get_move(game_state)[0]

    async def get_move_async(self, game_state):
        """
        Run get_move in a worker thread on a private copy of the game, so a
        caller can await it, show feedback meanwhile, or cancel the wait.
        """
        return await asyncio.to_thread(self.get_move, game_state.clone())


class HumanAgent(Agent):
    def get_move(self, game_state):
        """
        Prompt the human player to input a move.

        Parameters:
            game_state (TrianglesGame): The current state of the game.

        Returns:
            tuple: A tuple (line_id, None, None).
        """
        while True:
            try:
                move = input("\nEnter the line to claim (e.g., 7 or L07): ").strip().upper()

                # Validate input format
                if move.startswith('L'):
                    move = move[1:]
                if not move.isdigit():
                    raise ValueError("Invalid format. Use a line number, optionally prefixed by L.")

                line_id = int(move)
                if game_state.is_valid_move(line_id):
                    return line_id, None, None
                else:
                    print("Invalid move. Please try again.")
            except ValueError as e:
                print(e)


class RandomAgent(Agent):
    def get_move(self, game_state):
        """
        Select a random valid move.

        Returns:
            tuple: (line_id, None, None), or (None, None, None) if no line is free.
        """
        valid_moves = game_state.get_valid_moves()
        if not valid_moves:
            logger.warning("No valid move available.")
            return None, None, None
        return random.choice(valid_moves), None, None


class MinimaxAgent(Agent):
    """
    Fixed-depth minimax with alpha-beta pruning, move ordering and a bounded
    transposition table. A move that completes a triangle keeps the turn and
    does not consume depth.

    `max_time` (seconds) and `max_nodes` are optional safety bounds. When one is
    set the agent deepens iteratively up to `depth` and keeps the result of the
    deepest completed iteration.

    With `decisive_cutoff` a node stops searching once one side is winning by
    more than DECISIVE_THRESHOLD and no remaining line can improve its best
    value, so the result is the same as without it.
    """

    def __init__(self, depth=DEFAULT_DEPTH, use_cache=True, cache_soft_limit=200_000,
                 cache_hard_limit=250_000, max_time=None, max_nodes=None, decisive_cutoff=True):
        if depth < 1:
            raise InvalidConfiguration(f"Search depth must be at least 1, got {depth}.")
        self.depth = depth
        self.max_time = max_time
        self.max_nodes = max_nodes
        self.decisive_cutoff = decisive_cutoff
        self.transposition_table = TranspositionTable(cache_soft_limit, cache_hard_limit) if use_cache else None

        self.player = None
        self.nodes_searched = 0
        self.nodes_cut = 0
        self.decisive_cuts = 0
        self.last_value = None
        self.last_depth = 0
        self._start_time = None

    def get_move(self, game_state):
        start_time = time.time()
        move = self.choose_move(game_state)
        return move, time.time() - start_time, self.last_depth

    def choose_move(self, game_state):
        """
        Pick the line for the player to move.

        Raises:
            SearchExhausted: no line is left to claim.
        """
        valid_moves = game_state.get_valid_moves()
        if not valid_moves:
            logger.error(f"Search requested with no legal move (finished={game_state.game_over()}).")
            raise SearchExhausted("No legal move: every line is claimed or the game is over.")

        self.player = game_state.current_player
        self.nodes_searched = 0
        self.nodes_cut = 0
        self.decisive_cuts = 0
        self._start_time = time.time()

        if self.max_time is None and self.max_nodes is None:
            best_value, best_move = self.search_root(game_state, self.depth)
            self.last_depth = self.depth
        else:
            best_value, best_move = self._iterative_deepening(game_state)

        self.last_value = best_value
        logger.debug(
            f"J{self.player} chose L{best_move} (value={best_value}, depth={self.last_depth}, "
            f"nodes={self.nodes_searched}, cuts={self.nodes_cut}, decisive={self.decisive_cuts}, "
            f"{time.time() - self._start_time:.3f}s"
            + (f", cache={self.transposition_table.stats()}" if self.transposition_table is not None else "")
            + ")")
        return best_move

    def _iterative_deepening(self, game_state):
        best_move = self._order_moves(game_state, game_state.get_valid_moves())[0]
        best_value = None
        self.last_depth = 0

        for depth in range(1, self.depth + 1):
            try:
                value, move = self.search_root(game_state, depth)
            except TimeoutError:
                break
            best_value, best_move = value, move
            self.last_depth = depth

        if self.last_depth == 0:
            logger.warning(f"Search budget exhausted before depth 1, playing ordered move L{best_move}.")
        return best_value, best_move

    def search_root(self, game_state, depth):
        """
        Search every legal move of the player to move.

        Returns:
            tuple: (value, line_id) of the first move reaching the strictly greatest value.
        """
        self.player = game_state.current_player
        alpha, beta = -math.inf, math.inf
        best_value, best_move = -math.inf, None

        for move in self._order_moves(game_state, game_state.get_valid_moves()):
            clone_state = game_state.clone()
            result = clone_state.play_move(move)
            eval_val = self.minimax(clone_state, depth if result.completed_triangles else depth - 1, alpha, beta)
            if eval_val > best_value:
                best_value = eval_val
                best_move = move
            alpha = max(alpha, best_value)

        return best_value, best_move

    def minimax(self, game_state, depth, alpha, beta):
        self.nodes_searched += 1
        self._check_budget()

        if game_state.game_over() or depth == 0:
            return evaluate(game_state, self.player)

        # Transposition table lookup
        state_hash = None
        if self.transposition_table is not None:
            state_hash = (game_state.state_key(), self.player, depth)
            entry = self.transposition_table.get(state_hash, depth)
            if entry is not None:
                if entry.flag == FLAG_EXACT:
                    return entry.value
                elif entry.flag == FLAG_LOWERBOUND:
                    alpha = max(alpha, entry.value)
                elif entry.flag == FLAG_UPPERBOUND:
                    beta = min(beta, entry.value)
                if alpha >= beta:
                    self.nodes_cut += 1
                    return entry.value
        window_alpha, window_beta = alpha, beta

        maximizing_player = game_state.current_player == self.player
        best_value = -math.inf if maximizing_player else math.inf
        best_move = None
        if self.decisive_cutoff:
            floor, ceiling = value_bounds(game_state, self.player)

        for move in self._order_moves(game_state, game_state.get_valid_moves()):
            clone_state = game_state.clone()
            result = clone_state.play_move(move)
            eval_val = self.minimax(clone_state, depth if result.completed_triangles else depth - 1, alpha, beta)

            if maximizing_player:
                if eval_val > best_value:
                    best_value = eval_val
                    best_move = move
                alpha = max(alpha, best_value)
            else:
                if eval_val < best_value:
                    best_value = eval_val
                    best_move = move
                beta = min(beta, best_value)

            # Standard alpha-beta cutoff
            if beta <= alpha:
                self.nodes_cut += 1
                break

            # Nothing left can beat a decided best value
            if self.decisive_cutoff and (best_value >= ceiling if maximizing_player else best_value <= floor):
                self.decisive_cuts += 1
                break

        if state_hash is not None:
            if best_value <= window_alpha:
                flag = FLAG_UPPERBOUND
            elif best_value >= window_beta:
                flag = FLAG_LOWERBOUND
            else:
                flag = FLAG_EXACT
            self.transposition_table.put(state_hash, depth, best_value, flag, best_move)

        return best_value

    def _check_budget(self):
        if self.max_nodes is not None and self.nodes_searched > self.max_nodes:
            raise TimeoutError()
        if self.max_time is not None and self._start_time is not None:
            if time.time() - self._start_time >= self.max_time:
                raise TimeoutError()

    def _order_moves(self, game_state, moves):
        """
        Lines closing or setting up a triangle first; ties keep line id order.
        """
        return sorted(moves, key=lambda mv: score_move_for_ordering(game_state, mv), reverse=True)
