#!/usr/bin/env python3
"""
Objective Recompute Script

Re-derives current_value and status of every objective in a space from its
progress ledger (or, for auto-linked objectives, from the space's leads and
clients) and writes back the objectives whose value or status changed.
Paused objectives are left untouched.

Usage:
    python recompute_objectives.py --space 3f0c...e21
    python recompute_objectives.py --space 3f0c...e21 --dry-run
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from uuid import UUID

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from repositories.factory import build_repositories
from repositories.settings import load_settings
from services.objective_service import ObjectiveService


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Recompute value and status of the objectives of a space",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Recompute and persist
  python recompute_objectives.py --space 3f0c...e21

  # Show what would change without writing anything
  python recompute_objectives.py --space 3f0c...e21 --dry-run
        """
    )

    parser.add_argument(
        "--space",
        "-s",
        required=True,
        type=UUID,
        help="Space (organization) id"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report changes without persisting them"
    )

    args = parser.parse_args()

    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        repos = build_repositories(settings)
        service = ObjectiveService(repos.objectives, repos.leads, repos.clients)

        print(f"Recomputing objectives of space {args.space}...")
        if args.dry_run:
            print("  Dry run: nothing will be written")
        print()

        outcomes = service.recompute_space(args.space, persist=not args.dry_run)
        if not outcomes:
            print("No objectives to recompute")
            return 0

        changed = [outcome for outcome in outcomes if outcome.changed]
        for outcome in changed:
            print(
                f"  {outcome.title}: "
                f"{outcome.previous_value} -> {outcome.current_value}, "
                f"{outcome.previous_status.value} -> {outcome.status.value}"
            )

        print()
        print("=" * 60)
        print("RECOMPUTE SUMMARY")
        print("=" * 60)
        print(f"Objectives checked: {len(outcomes)}")
        print(f"Objectives changed: {len(changed)}")
        if args.dry_run and changed:
            print("Run again without --dry-run to persist the changes")
        print("=" * 60)

        return 0

    except KeyboardInterrupt:
        print("\n\nRecompute interrupted by user")
        return 130

    except Exception as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
