#board_rules_interface.py
import logging
from typing import List, NamedTuple, Optional, Tuple

import numpy as np

from agents import MinimaxAgent
from board_topology import BoardTopology
from errors import InvalidConfiguration, InvalidMove

logger = logging.getLogger(__name__)

PLAYERS = (1, 2)
HUMAN = 1
COMPUTER = 2
UNCLAIMED = 0


class MoveResult(NamedTuple):
    accepted: bool
    line_id: Optional[int]
    completed_triangles: Tuple[int, ...]
    scores: Tuple[int, int]
    to_move: int
    finished: bool


class TrianglesGame:
    def __init__(self, player1_agent=None, player2_agent=None, num_layers=6, starting_player=1,
                 game_id=None, topology=None):
        if starting_player not in PLAYERS:
            raise InvalidConfiguration(f"Starting player must be 1 or 2, got {starting_player}.")
        self.topology = topology if topology is not None else BoardTopology(num_layers)
        # 0 = unclaimed, otherwise the id of the player who claimed it
        self.line_owner = np.zeros(self.topology.num_lines, dtype=np.int8)
        self.triangle_owner = np.zeros(self.topology.num_triangles, dtype=np.int8)
        self.scores = np.zeros(2, dtype=np.int16)
        self.starting_player = starting_player
        self.current_player = starting_player
        self.finished = False
        # None means the player is driven from outside (clicks, API calls)
        self.player_agents = {
            1: player1_agent,
            2: player2_agent
        }
        self.turn_number = 0
        self.game_id = game_id
        self.moves_log = []

    # ------------------------------------------------------------------
    #   Rules
    # ------------------------------------------------------------------
    def is_valid_move(self, line_id, player=None) -> bool:
        if self.finished or not isinstance(line_id, (int, np.integer)) or isinstance(line_id, bool):
            return False
        if player is not None and player != self.current_player:
            return False
        return 0 <= line_id < self.topology.num_lines and self.line_owner[line_id] == UNCLAIMED

    def get_valid_moves(self) -> List[int]:
        if self.finished:
            return []
        return np.flatnonzero(self.line_owner == UNCLAIMED).tolist()

    def play_move(self, line_id: int, player: Optional[int] = None) -> MoveResult:
        """
        Claim a line for `player` (defaults to the player to move).

        Completing one or more triangles scores a point each and keeps the turn;
        otherwise the turn passes. The game ends as soon as every triangle is
        completed, even if free lines remain.

        Raises:
            InvalidMove: the state is left unchanged.
        """
        player = self.current_player if player is None else player
        if self.finished:
            raise InvalidMove("The game is already finished.", line_id, player)
        if not isinstance(line_id, (int, np.integer)) or isinstance(line_id, bool):
            raise InvalidMove(f"Line {line_id!r} is not a line id.", line_id, player)
        if not 0 <= line_id < self.topology.num_lines:
            raise InvalidMove(f"Line {line_id} does not exist.", line_id, player)
        if self.line_owner[line_id] != UNCLAIMED:
            raise InvalidMove(f"Line {line_id} is already claimed.", line_id, player)
        if player != self.current_player:
            raise InvalidMove(f"It is not player {player}'s turn.", line_id, player)

        self.line_owner[line_id] = player

        completed = []
        for triangle_id in self.topology.line_triangles[line_id]:
            if self.triangle_owner[triangle_id] != UNCLAIMED:
                continue
            if np.all(self.line_owner[self.topology.triangle_lines[triangle_id]] != UNCLAIMED):
                self.triangle_owner[triangle_id] = player
                completed.append(triangle_id)
        self.scores[player - 1] += len(completed)

        if np.all(self.triangle_owner != UNCLAIMED):
            self.finished = True
        elif not completed:
            self.current_player = 3 - self.current_player

        return MoveResult(True, line_id, tuple(completed), self.get_scores(), self.current_player, self.finished)

    def clone(self):
        # The topology is immutable, only the claim arrays need copying
        cloned_game = TrianglesGame.__new__(TrianglesGame)
        cloned_game.topology = self.topology
        cloned_game.line_owner = self.line_owner.copy()
        cloned_game.triangle_owner = self.triangle_owner.copy()
        cloned_game.scores = self.scores.copy()
        cloned_game.starting_player = self.starting_player
        cloned_game.current_player = self.current_player
        cloned_game.finished = self.finished
        cloned_game.player_agents = self.player_agents
        cloned_game.turn_number = self.turn_number
        cloned_game.game_id = self.game_id
        cloned_game.moves_log = []
        return cloned_game

    def state_key(self):
        """Compact hashable encoding: bit-packed claims per player, scores, player to move."""
        return (np.packbits(self.line_owner == 1).tobytes(),
                np.packbits(self.line_owner == 2).tobytes(),
                int(self.scores[0]),
                int(self.scores[1]),
                self.current_player)

    def game_over(self) -> bool:
        return self.finished

    def get_scores(self) -> Tuple[int, int]:
        return int(self.scores[0]), int(self.scores[1])

    def get_winner(self):
        if self.scores[0] > self.scores[1]:
            return 1
        elif self.scores[1] > self.scores[0]:
            return 2
        else:
            return None

    def line_states(self) -> List[int]:
        return self.line_owner.tolist()

    def triangle_states(self) -> List[int]:
        return self.triangle_owner.tolist()

    # ------------------------------------------------------------------
    #   Turn control
    # ------------------------------------------------------------------
    def apply_human_move(self, line_id: int) -> MoveResult:
        """
        Claim a line for the human player. Like play_move, but a rejected move
        (including one made while the computer is to move) is reported instead
        of raised.
        """
        mover = HUMAN
        try:
            result = self.play_move(line_id, player=HUMAN)
        except InvalidMove as e:
            logger.info(f"Rejected move on line {line_id}: {e}")
            return MoveResult(False, line_id, (), self.get_scores(), self.current_player, self.finished)
        self._record(mover, result, None, None)
        return result

    def advance(self) -> List[MoveResult]:
        """
        Play moves for every automatic agent whose turn it is, including extra
        turns, until an externally driven player is to move or the game ends.
        """
        results = []
        while not self.finished and self.player_agents[self.current_player] is not None:
            mover = self.current_player
            line_id, compute_time, depth_reached = self.get_move_for_current_player()
            result = self.play_move(line_id)
            self._record(mover, result, compute_time, depth_reached)
            results.append(result)
        return results

    def get_move_for_current_player(self):
        current_agent = self.player_agents[self.current_player]
        return current_agent.get_move(self)

    def agent_name(self, player) -> str:
        agent = self.player_agents[player]
        return agent.__class__.__name__ if agent is not None else "External"

    def _record(self, mover, result, compute_time, depth_reached):
        self.turn_number += 1
        self.moves_log.append({
            'turn_number': self.turn_number,
            'player': mover,
            'line': result.line_id,
            'completed_triangles': list(result.completed_triangles),
            'compute_time': compute_time,
            'depth_reached': depth_reached
        })

    def run_game(self):
        """Console loop: every player must have an agent (HumanAgent prompts on stdin)."""
        self.display_board()

        while not self.game_over():
            mover = self.current_player
            line_id, compute_time, depth_reached = self.get_move_for_current_player()
            if line_id is None:
                break

            try:
                result = self.play_move(line_id)
            except InvalidMove as e:
                print(e)
                continue

            self._record(mover, result, compute_time, depth_reached)
            self.display_board(last_move=(mover, line_id), depth_reached=depth_reached, calc_time=compute_time)

        self.display_game_end()

    # ------------------------------------------------------------------
    #   Text display
    # ------------------------------------------------------------------
    def display_board(self, last_move=None, depth_reached=None, calc_time=None):
        if last_move:
            player_num, line_id = last_move
            agent_name = self.agent_name(player_num)
            if depth_reached is not None and calc_time is not None:
                print(f"\nJ{player_num} ({agent_name}[{calc_time:.2f}s, {depth_reached} depth]): L{line_id:02d}")
            else:
                print(f"\nJ{player_num} ({agent_name}): L{line_id:02d}")

        print(f"\nT{self.turn_number} (J1={self.scores[0]}, J2={self.scores[1]}), J{self.current_player} to move:")
        for layer in range(self.topology.num_layers):
            row = [node for node in self.topology.nodes if node.layer == layer]
            indent = " " * 3 * (self.topology.num_layers - layer - 1)
            print(indent + "     ".join(f"{node.id:02d}" for node in row))

        cells = []
        for line in self.topology.lines:
            owner = self.line_owner[line.id]
            mark = f"J{owner}" if owner else "--"
            cells.append(f"L{line.id:02d} {line.node1:02d}-{line.node2:02d} {mark}")
        for start in range(0, len(cells), 4):
            print("  " + " | ".join(cells[start:start + 4]))

        completed = [f"T{t.id}:J{self.triangle_owner[t.id]}" for t in self.topology.triangles
                     if self.triangle_owner[t.id]]
        if completed:
            print("  Triangles: " + " ".join(completed))

    def display_game_end(self):
        print("\nENDGAME\n")

        winner = self.get_winner()
        if winner is None:
            print("WINNER: TIE")
        else:
            print(f"WINNER: J{winner} ({self.agent_name(winner)})")

        print("\nSCORE:")
        print(f"  J1 ({self.agent_name(1)}): {self.scores[0]}")
        print(f"  J2 ({self.agent_name(2)}): {self.scores[1]}")
        print()

    def get_game_data(self):
        """
        Retrieve all relevant game data for logging.
        """
        winner = self.get_winner()
        return {
            'game_id': self.game_id,
            'num_layers': self.topology.num_layers,
            'player1_agent': self.agent_name(1),
            'player2_agent': self.agent_name(2),
            'starting_player': self.starting_player,
            'moves': self.moves_log,
            'winner': f"Player {winner}" if winner else "Tie",
            'player1_score': self.scores[0],
            'player2_score': self.scores[1],
            'number_of_turns': self.turn_number
        }


def new_game(num_layers, starting_player=HUMAN, computer_agent=None):
    """
    Start a human vs computer game. The human (player 1) is driven through
    apply_human_move; the computer (player 2) through advance().

    Returns:
        tuple: (nodes, lines, triangles, game)
    """
    if computer_agent is None:
        computer_agent = MinimaxAgent()
    game = TrianglesGame(player1_agent=None, player2_agent=computer_agent,
                         num_layers=num_layers, starting_player=starting_player)
    topology = game.topology
    return topology.nodes, topology.lines, topology.triangles, game


def compute_ai_move(game, agent=None):
    """
    Ask a search agent for the move of the player to move, without applying it.
    Uses the agent driving that player unless one is given.

    Raises:
        InvalidMove: the player to move is driven from outside and no agent was given.
        SearchExhausted: no line is left to claim.
    """
    if agent is None:
        agent = game.player_agents[game.current_player]
    if agent is None:
        raise InvalidMove(f"Player {game.current_player} is not driven by an agent.",
                          player=game.current_player)
    return agent.choose_move(game)
