"""
Sample tournament payloads for seeding stores and manual testing.

Groups of four play doubles: each player partners every other player once,
giving three rounds per group.
"""

from __future__ import annotations

import random
import string
import uuid
from typing import Optional

# Partner rotation within a group of four: (team A, team B) by player index.
ROUND_PAIRINGS = (
    ((0, 1), (2, 3)),
    ((0, 2), (1, 3)),
    ((0, 3), (1, 2)),
)


def _player(index: int, category: str) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "nome": f"Jogador {index}",
        "categoria": category,
        "isSeed": False,
        "status": "enrolled",
    }


def _match(group_id: str, players: list[dict], rodada: int, rng: random.Random, games_per_set: int) -> dict:
    (a1, a2), (b1, b2) = ROUND_PAIRINGS[rodada - 1]
    winner_games = games_per_set
    loser_games = rng.randint(0, games_per_set - 1)
    if rng.random() < 0.5:
        games_a, games_b = winner_games, loser_games
    else:
        games_a, games_b = loser_games, winner_games
    return {
        "id": str(uuid.uuid4()),
        "groupId": group_id,
        "jogador1A": players[a1],
        "jogador2A": players[a2],
        "jogador1B": players[b1],
        "jogador2B": players[b2],
        "sets": [{"gamesA": games_a, "gamesB": games_b, "tieBreakA": 0, "tieBreakB": 0}],
        "setsWonA": int(games_a > games_b),
        "setsWonB": int(games_b > games_a),
        "isFinished": True,
        "rodada": rodada,
    }


def build_sample_tournament(
    num_players: int = 24,
    *,
    name: str = "Torneio de Exemplo",
    category: str = "Geral",
    games_per_set: int = 6,
    seed: Optional[int] = None,
) -> dict:
    """Build a finished first phase with ``num_players`` split into groups of four."""
    if num_players < 4 or num_players % 4:
        raise ValueError("num_players must be a positive multiple of 4")
    if num_players // 4 > len(string.ascii_uppercase):
        raise ValueError("too many groups to label")

    rng = random.Random(seed)
    players = [_player(i, category) for i in range(1, num_players + 1)]
    groups = []
    for index in range(num_players // 4):
        group_id = str(uuid.uuid4())
        members = players[index * 4:(index + 1) * 4]
        groups.append(
            {
                "id": group_id,
                "nome": string.ascii_uppercase[index],
                "fase": 1,
                "categoria": category,
                "players": members,
                "matches": [
                    _match(group_id, members, rodada, rng, games_per_set)
                    for rodada in range(1, len(ROUND_PAIRINGS) + 1)
                ],
            }
        )

    return {
        "nome": name,
        "categorias": [category],
        "gameConfig": {
            "quantidadeSets": 1,
            "gamesPerSet": games_per_set,
            "tieBreakDecisivo": False,
            "pontosTieBreak": 7,
        },
        "grupos": groups,
        "waitingList": [],
        "completedCategories": [],
        "crossGroupTiebreaks": [],
    }
