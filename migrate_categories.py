from __future__ import annotations

import argparse
import logging
import os
import sys

import redis

from codekeep.exception_handler import setup_logging
from codekeep.store import SnippetStore
from codekeep.store.migration import migrate_categories


logger = logging.getLogger("codekeep")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Convert snippets stored with a single category into the tags schema"
    )
    parser.add_argument(
        "--redis-url",
        dest="redis_url",
        default=None,
        help="Redis connection URL (defaults to REDIS_URL env variable)",
    )
    parser.add_argument(
        "--key-prefix",
        dest="key_prefix",
        default=None,
        help=f"Key prefix of the snippet documents (default: {SnippetStore.DEFAULT_PREFIX})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be migrated without writing anything",
    )

    args = parser.parse_args()
    setup_logging("INFO")

    redis_url = args.redis_url or os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")
    key_prefix = args.key_prefix or os.getenv("CODEKEEP_KEY_PREFIX", SnippetStore.DEFAULT_PREFIX)
    store = SnippetStore(redis.Redis.from_url(redis_url), key_prefix=key_prefix)

    try:
        report = migrate_categories(store, dry_run=args.dry_run)
    except KeyboardInterrupt:
        print("\n⚠️ Migration interrupted", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.exception("Category migration failed")
        print("❌ Migration failed. See log for details.", file=sys.stderr)
        sys.exit(1)

    if report.failed:
        print(f"⚠️  {len(report.failed)} snippet(s) could not be migrated:", file=sys.stderr)
        for snippet_id in report.failed[:5]:
            print(f"  • {snippet_id}", file=sys.stderr)
        if len(report.failed) > 5:
            print(f"  ... and {len(report.failed) - 5} more", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
