#!/usr/bin/env python3
"""
Grant premium to a user by email (manual override).

Sets isPremium, subscriptionStatus=active and subscriptionId=manual_override_admin
on every users document with the given email.

Usage:
    python scripts/set_premium.py monte@gmail.com            # dry-run
    python scripts/set_premium.py monte@gmail.com --apply    # apply changes
"""

import argparse
import logging

from fitai.admin.premium import make_user_premium


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Grant premium status to a user by email"
    )
    parser.add_argument("email", help="Email of the user to upgrade")
    parser.add_argument(
        "--apply", action="store_true",
        help="Actually apply changes (default: dry-run)"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    updated = make_user_premium(args.email, apply=args.apply)

    if not updated:
        print("No user found with that email.")
    elif args.apply:
        print(f"Granted PREMIUM to {len(updated)} user(s): {', '.join(updated)}")
    else:
        print(f"DRY RUN: would grant PREMIUM to {len(updated)} user(s): {', '.join(updated)}")
        print("Run with --apply to execute")
