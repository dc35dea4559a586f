#main.py
import argparse
import logging
import os
import re
import time

import agents
import data_export
from board_rules_interface import TrianglesGame
from board_topology import BoardTopology
from errors import InvalidConfiguration

AGENTS = {
    'human': agents.HumanAgent,
    'random': agents.RandomAgent,
    'minimax': agents.MinimaxAgent,
}


def get_next_filename(directory, agent1_class, agent2_class, num_games):
    """
    Generate the next available filename with an incremented numerical prefix,
    e.g. ``03-MinimaxAgent-vs-RandomAgent-10.csv``.
    """
    pattern = rf'^(\d+)-{agent1_class.__name__}-vs-{agent2_class.__name__}-{num_games}\.csv$'
    regex = re.compile(pattern)

    highest_num = -1

    if not os.path.exists(directory):
        os.makedirs(directory)

    for filename in os.listdir(directory):
        match = regex.match(filename)
        if match:
            highest_num = max(highest_num, int(match.group(1)))

    new_filename = f'{highest_num + 1:02d}-{agent1_class.__name__}-vs-{agent2_class.__name__}-{num_games}.csv'
    return os.path.join(directory, new_filename)


def make_agent(agent_class, depth, max_time):
    if agent_class is agents.MinimaxAgent:
        return agent_class(depth=depth, max_time=max_time)
    return agent_class()


def run_multiple_games(num_games, agent1_class, agent2_class, num_layers=6, starting_player=1,
                       depth=agents.DEFAULT_DEPTH, max_time=None, directory='game_datas', display=True):
    """
    Run several games between two agents and append each record to a CSV file.

    Returns:
        str: The path of the CSV file written.
    """
    topology = BoardTopology(num_layers)
    csv_filename = get_next_filename(directory, agent1_class, agent2_class, num_games)
    logging.info(f"Exporting games to: {csv_filename}")

    start_time = time.time()
    logging.info("Simulation started.")

    for game_id in range(1, num_games + 1):
        game = TrianglesGame(
            player1_agent=make_agent(agent1_class, depth, max_time),
            player2_agent=make_agent(agent2_class, depth, max_time),
            starting_player=starting_player,
            game_id=game_id,
            topology=topology
        )
        if display:
            game.run_game()
        else:
            game.advance()

        game_data = game.get_game_data()
        data_export.write_game_to_csv(csv_filename, game_data)
        logging.info(f"Game {game_id}/{num_games} completed. Winner: {game_data['winner']}")

    elapsed_time = time.time() - start_time
    hours, rem = divmod(elapsed_time, 3600)
    minutes, seconds = divmod(rem, 60)
    logging.info(f"Simulation completed in {int(hours)}h {int(minutes)}m {int(seconds)}s.")
    return csv_filename


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Claim lines of a triangular pyramid, close triangles, score.")
    parser.add_argument('--layers', type=int, default=6, help="number of layers of the pyramid (>= 2)")
    parser.add_argument('--first', type=int, choices=(1, 2), default=1, help="player who moves first")
    parser.add_argument('--player1', choices=sorted(AGENTS), default='human')
    parser.add_argument('--player2', choices=sorted(AGENTS), default='minimax')
    parser.add_argument('--depth', type=int, default=agents.DEFAULT_DEPTH, help="minimax search depth")
    parser.add_argument('--max-time', type=float, default=None, help="optional time limit per move, in seconds")
    parser.add_argument('--games', type=int, default=1)
    parser.add_argument('--directory', default='game_datas')
    parser.add_argument('--quiet', action='store_true', help="do not print the board after each move")
    return parser.parse_args(argv)


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        handlers=[
            logging.FileHandler("game_generation.log"),
            logging.StreamHandler()
        ]
    )
    args = parse_args(argv)
    try:
        run_multiple_games(
            num_games=args.games,
            agent1_class=AGENTS[args.player1],
            agent2_class=AGENTS[args.player2],
            num_layers=args.layers,
            starting_player=args.first,
            depth=args.depth,
            max_time=args.max_time,
            directory=args.directory,
            display=not args.quiet
        )
    except InvalidConfiguration as e:
        logging.error(f"Invalid configuration: {e}")
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
