import argparse
import sys

from app.core.config import load_config
from app.core.http import configure_logging_if_needed
from app.errors import LoadError
from app.gtfs.store import DatasetStore


def main():
    p = argparse.ArgumentParser(description="Load the GTFS static dataset and report what was parsed")
    p.add_argument("--local-only", action="store_true", help="Skip the remote archive even if TRANSIT_API_KEY is set")
    args = p.parse_args()

    cfg = load_config()
    configure_logging_if_needed(cfg.log_level)

    store = DatasetStore.from_settings(cfg, local_only=args.local_only)

    try:
        ready = store.ensure_fresh()
    except LoadError as e:
        print({"loaded": False, "error": str(e)})
        sys.exit(1)

    print({**store.status(), "stale": ready.stale})


if __name__ == "__main__":
    main()
