# This project was developed with assistance from AI tools.
"""CLI entrypoint for demo catalog seeding.

Usage:
    python -m loandesk.seed          # Seed demo catalog
    python -m loandesk.seed --force  # Clear and re-seed
"""

import argparse
import asyncio
import json
import sys

from loandesk_db.database import SessionLocal

from .services.seed.seeder import seed_catalog


async def main(force: bool = False) -> None:
    """Run demo catalog seeding."""
    async with SessionLocal() as session:
        result = await seed_catalog(session, force=force)
        print(json.dumps(result, indent=2, default=str))

        if result.get("status") == "already_seeded":
            print("\nDemo catalog already seeded. Use --force to re-seed.")
            sys.exit(0)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the LoanDesk demo catalog")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Clear the existing catalog and re-seed",
    )
    args = parser.parse_args()
    asyncio.run(main(force=args.force))
