"""Local Network Hub: self-hosted link dashboard CLI."""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from hub.store import DATA_DIR

logger = logging.getLogger("hub")


def setup_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _open_data(data_dir: Path):
    from hub.projects import PROJECTS_DIR_NAME, NotesRepository
    from hub.store import DATA_FILE_NAME, DocumentStore

    store = DocumentStore(data_dir / DATA_FILE_NAME)
    store.load()
    return store, NotesRepository(data_dir / PROJECTS_DIR_NAME)


# ── Commands ─────────────────────────────────────────────────────────────


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    if args.reload:
        # The reloader imports the app in a fresh process, which reads HUB_DATA_DIR.
        os.environ["HUB_DATA_DIR"] = str(Path(args.data_dir).resolve())
        uvicorn.run("hub.api:create_app", factory=True, host=args.host, port=args.port, reload=True)
        return

    from hub.api import build_hub, create_app

    try:
        app = create_app(build_hub(args.data_dir))
    except Exception:
        logger.exception("Failed to start server")
        sys.exit(1)

    logger.info("Local Network Hub running on port %s", args.port)
    logger.info("Access the application at: http://localhost:%s", args.port)
    uvicorn.run(app, host=args.host, port=args.port)


def cmd_stats(args: argparse.Namespace) -> None:
    store, notes = _open_data(args.data_dir)
    print(f"Links:         {len(store.links)}")
    print(f"Categories:    {len(store.categories)}")
    print(f"Project files: {len(notes.list())}")


def cmd_backup(args: argparse.Namespace) -> None:
    from hub.backup import create_backup

    store, notes = _open_data(args.data_dir)
    dest = create_backup(store, notes, Path(args.output) if args.output else None)
    print(f"Backup written to {dest}")


# ── CLI ──────────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="hub",
        description="Local Network Hub: links, categories and project notes",
    )
    parser.add_argument("--data-dir", type=Path, default=DATA_DIR, help=f"Data directory (default: {DATA_DIR})")
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the web server")
    p_serve.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")), help="Port (default: $PORT or 3000)")
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # stats
    p_stats = sub.add_parser("stats", help="Show link, category and note counts")
    p_stats.set_defaults(func=cmd_stats)

    # backup
    p_backup = sub.add_parser("backup", help="Write a backup ZIP")
    p_backup.add_argument("--output", help="Destination path (default: a temp file)")
    p_backup.set_defaults(func=cmd_backup)

    args = parser.parse_args(argv)
    setup_logging()
    args.func(args)


if __name__ == "__main__":
    main()
