#data_export.py
import csv
import json
import os
import numpy as np
from typing import Dict, List, Optional, Any


def to_native(value: Any) -> Any:
    """
    Recursively turn the NumPy scalars and arrays found in a game record into
    plain Python values, so the record can go through csv and json untouched.
    """
    if isinstance(value, dict):
        return {key: to_native(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_native(item) for item in value]
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _to_row(game_data: Dict[str, Any]) -> Dict[str, Any]:
    row = to_native(game_data)
    # One CSV cell per game: the move list is stored as a JSON array
    row['moves'] = json.dumps(row['moves'])
    return row


def write_game_to_csv(csv_filename: str, game_data: Dict[str, Any], fieldnames: Optional[List[str]] = None) -> None:
    """
    Append one game record to a CSV file, writing the header if the file is new.

    Parameters:
        csv_filename (str): The path to the CSV file
        game_data (dict): A record from TrianglesGame.get_game_data()
        fieldnames (list, optional): CSV column names. If None, use keys from game_data
    """
    write_games_to_csv(csv_filename, [game_data], fieldnames)


def write_games_to_csv(csv_filename: str, games_data: List[Dict[str, Any]], fieldnames: Optional[List[str]] = None) -> None:
    if not games_data:
        return

    file_exists = os.path.isfile(csv_filename)

    directory = os.path.dirname(csv_filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if fieldnames is None:
        fieldnames = list(games_data[0].keys())

    with open(csv_filename, mode='a', newline='', encoding='utf-8') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames)

        if not file_exists:
            writer.writeheader()

        for game_data in games_data:
            writer.writerow(_to_row(game_data))
