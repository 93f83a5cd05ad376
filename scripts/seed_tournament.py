"""
Generate a sample tournament and write it to disk or save it into the store.
"""

from __future__ import annotations

import argparse
import json
import logging
import secrets
import sys
import uuid
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tournament_backend.dependencies import (
    close_tournament_store,
    get_tournament_service,
    get_tournament_store,
)
from tournament_backend.errors import TournamentError
from tournament_backend.samples import build_sample_tournament

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a sample tournament")
    parser.add_argument(
        "-n",
        "--num-players",
        type=int,
        default=24,
        help="Number of players (multiple of 4)",
    )
    parser.add_argument(
        "--name",
        type=str,
        default="Torneio de Exemplo",
        help="Tournament name",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for match scores",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the tournament JSON here instead of saving it to the store",
    )
    parser.add_argument(
        "--id",
        dest="tournament_id",
        type=str,
        default=None,
        help="Tournament UUID (generated when omitted)",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="Admin token (generated when omitted)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
    )

    try:
        tournament = build_sample_tournament(
            args.num_players, name=args.name, seed=args.seed
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    if args.output:
        args.output.write_text(json.dumps(tournament, indent=2, ensure_ascii=False))
        logger.info("Wrote %s", args.output)
        return 0

    tournament_id = args.tournament_id or str(uuid.uuid4())
    token = args.token or secrets.token_urlsafe(24)
    service = get_tournament_service(get_tournament_store())
    try:
        updated_at = service.save(tournament_id, token, tournament)
    except TournamentError as exc:
        logger.error("Seeding failed: %s", exc.message)
        return 1
    finally:
        close_tournament_store()

    print(json.dumps({"tournamentId": tournament_id, "adminToken": token, "updatedAt": updated_at}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
