import argparse
from datetime import datetime

from app.core.config import load_config
from app.core.http import configure_logging_if_needed
from app.gtfs.store import DatasetStore
from app.schedule.board import build_departure_board


def main():
    p = argparse.ArgumentParser(description="Print the next trains between two stations")
    p.add_argument("--origin", required=True, help="Station code or id (e.g. SF)")
    p.add_argument("--destination", required=True, help="Station code or id (e.g. PA)")
    p.add_argument("--at", help="ISO datetime with offset (default: now)")
    p.add_argument("--no-realtime", action="store_true", help="Ignore live delay sources")
    args = p.parse_args()

    cfg = load_config()
    configure_logging_if_needed(cfg.log_level)

    store = DatasetStore.from_settings(cfg)
    when = datetime.fromisoformat(args.at) if args.at else None

    board = build_departure_board(
        store,
        cfg,
        args.origin,
        args.destination,
        when,
        trip_updates=[] if args.no_realtime else None,
        scraped_delays={} if args.no_realtime else None,
    )

    for t in board.trains:
        late = f" ({t.delay_minutes:+d} min)" if t.delay_minutes else ""
        print(
            f"{t.train_number:>5} {t.type:<8} {t.departure_time:%H:%M} -> {t.arrival_time:%H:%M} "
            f"{t.duration_minutes:>3} min {t.status}{late}"
        )
    print(
        {
            "count": len(board.trains),
            "used_fallback_data": board.used_fallback_data,
            "is_synthetic": board.is_synthetic,
            "dataset_source": board.dataset_source,
            "realtime_sources": list(board.realtime_sources),
            "reason": board.reason,
        }
    )


if __name__ == "__main__":
    main()
