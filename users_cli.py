#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Users store console tool (SQLite)

Commands:
  init                Create the users table (and the operation log) if missing
  add-user            Insert one user
  show                Print users as a table, optionally filtered / ordered / paged
  serve               Run the HTTP API with uvicorn

Notes:
- The DB path comes from --db, then USERS_DB_PATH, then config.yaml, then ./users.db.
- The port comes from --port, then PORT, then config.yaml, then 8080.
"""

import argparse
import os
import sys

from userpager.config import get_port
from userpager.domain.user_query import Filters, OrderSpec, RetrieveOptions, User
from userpager.errors import StoreError
from userpager.logs import setup_logging
from userpager.store import UserStore


def cmd_init(args):
    store = UserStore.open(args.db)
    store.close()
    print("DB initialized at", store.path)


def cmd_add_user(args):
    store = UserStore.open(args.db)
    try:
        new_id = store.insert(User(
            name=args.name,
            age=args.age,
            country=args.country,
            degree=args.degree,
            status=args.status,
            site=args.site,
        ))
    finally:
        store.close()
    print("User inserted with id", new_id)


def cmd_show(args):
    store = UserStore.open(args.db)
    try:
        filters = Filters.from_dict({
            "status": args.status,
            "countries": args.country,
            "age": args.age,
            "degree": args.degree,
        })
        if args.page:
            order = OrderSpec.of(_parse_order(args.order))
            users = store.paginate(args.page_size, args.page, order, filters)
        else:
            pairs = _parse_order(args.order)
            if len(pairs) > 1:
                raise ValueError("only one --order column without --page")
            opts = RetrieveOptions(*(pairs[0] if pairs else (None, None)), limit=args.limit)
            users = store.retrieve_filtered(filters, opts)
    finally:
        store.close()
    print(UserStore.render_table(users), end="")


def cmd_serve(args):
    import uvicorn

    if args.db:
        os.environ["USERS_DB_PATH"] = args.db
    port = args.port or get_port()
    uvicorn.run("userpager.api:app", host=args.host, port=port)


def _parse_order(items):
    """["age:desc", "name"] -> [("age", "desc"), ("name", "asc")]"""
    out = []
    for it in items or []:
        col, _, direction = it.partition(":")
        out.append((col, direction or "asc"))
    return out


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="Users store (SQLite)")
    parser.add_argument("--db", default=None, help="SQLite file path")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create the users table")
    p_init.set_defaults(func=cmd_init)

    p_add = sub.add_parser("add-user", help="insert a user")
    p_add.add_argument("--name", required=True)
    p_add.add_argument("--age", required=True, type=int)
    p_add.add_argument("--country", required=True)
    p_add.add_argument("--degree", required=False)
    p_add.add_argument("--status", required=False)
    p_add.add_argument("--site", required=False)
    p_add.set_defaults(func=cmd_add_user)

    p_show = sub.add_parser("show", help="print users as a table")
    p_show.add_argument("--status", required=False)
    p_show.add_argument("--country", action="append", help="repeatable")
    p_show.add_argument("--age", required=False, type=int)
    p_show.add_argument("--degree", required=False)
    p_show.add_argument("--order", action="append", help="column[:asc|desc], repeatable")
    p_show.add_argument("--limit", type=int, default=0)
    p_show.add_argument("--page", type=int, default=0, help="1-indexed page, enables pagination")
    p_show.add_argument("--page-size", type=int, default=10)
    p_show.set_defaults(func=cmd_show)

    p_serve = sub.add_parser("serve", help="run the HTTP API")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    setup_logging()
    try:
        args.func(args)
    except ValueError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    except StoreError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
