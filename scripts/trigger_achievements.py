"""CLI script to manually trigger achievement checks and XP resets."""
from __future__ import annotations

import argparse

from questboard.tasks.achievements import check_all_achievements, check_user_achievements
from questboard.tasks.progress import reset_monthly_xp, reset_weekly_xp


def _run(task, use_async: bool, *args) -> None:
    if use_async:
        queued = task.apply_async(args=args)
        print(f"Task queued: {queued.id}")
    else:
        result = task.run(*args)
        print(f"Result: {result}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Manually trigger achievement checks and XP counter resets",
    )
    parser.add_argument(
        "--user-id",
        type=str,
        help="Check achievements for specific user only",
    )
    parser.add_argument(
        "--async",
        action="store_true",
        dest="use_async",
        help="Queue task asynchronously instead of running immediately",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Check achievements for all active users",
    )
    parser.add_argument(
        "--reset",
        choices=["weekly", "monthly"],
        help="Reset the weekly or monthly XP counter for every user",
    )

    args = parser.parse_args()

    if args.reset == "weekly":
        print("Resetting weekly XP...")
        _run(reset_weekly_xp, args.use_async)
    elif args.reset == "monthly":
        print("Resetting monthly XP...")
        _run(reset_monthly_xp, args.use_async)
    elif args.all:
        print("Checking achievements for all active users...")
        _run(check_all_achievements, args.use_async)
    elif args.user_id:
        print(f"Checking achievements for user {args.user_id}")
        _run(check_user_achievements, args.use_async, args.user_id)
    else:
        parser.error("Specify --user-id, --all or --reset")


if __name__ == "__main__":
    main()
