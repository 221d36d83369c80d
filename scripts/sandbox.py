#!/usr/bin/env python3
"""
Exercise every JsonStorage operation against a JSON file and print the results.

Usage:
  python scripts/sandbox.py [--db db.json] [--email test@example.com]
"""
from __future__ import annotations

import argparse

from social_api.repositories.json_storage import JsonStorage, StorageError


def main() -> None:
    ap = argparse.ArgumentParser(description="Smoke run of the JSON store")
    ap.add_argument("--db", default="db.json", help="Backing file (default: db.json)")
    ap.add_argument("--email", default="test@example.com", help="User used for the run")
    args = ap.parse_args()

    store = JsonStorage(args.db)
    email = args.email
    try:
        store.ensure_db()
        print("database ensured")

        print("user created", store.create_user(email, "password", "john doe", 18))
        print("user updated", store.update_user(email, "password", "john doe", 21))
        print("user got", store.get_user(email))
        store.delete_user(email)
        print("user deleted")

        print("user created", store.create_user(email, "password", "john doe", 18))
        first = store.create_post(email, "post 1")
        print("post created", first)
        print("post created", store.create_post(email, "post 2"))
        print("posts got", store.get_posts(email))

        store.delete_post(first.id)
        print("post deleted", first.id)
        print("posts got", store.get_posts(email))
    except StorageError as exc:
        raise SystemExit(f"sandbox failed: {exc}")


if __name__ == "__main__":
    main()
