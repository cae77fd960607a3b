"""Render the sky image for a stored snapshot without going through HTTP."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from scopestatus.core.config import settings
from scopestatus.core.errors import NotFound, RenderFailure, StorageError
from scopestatus.core.logging_config import setup_logging
from scopestatus.db.session import Database
from scopestatus.services.renderer import SubprocessSkyRenderer
from scopestatus.services.status import StatusService
from scopestatus.services.store import SnapshotStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Render a snapshot's sky image with astrosky.")
    parser.add_argument("--id", type=int, default=None, help="Snapshot id (default: latest).")
    parser.add_argument("--output", type=Path, default=Path("sky.png"), help="Where to write the PNG.")
    parser.add_argument("--debug", action="store_true", help="Pass --debug to the renderer.")
    args = parser.parse_args(argv)

    setup_logging("render-sky")
    cfg = settings.model_copy(update={"renderer_debug": args.debug or settings.renderer_debug})
    database = Database.from_settings(cfg)
    service = StatusService(SnapshotStore(database), SubprocessSkyRenderer.from_settings(cfg), cfg)

    try:
        resolved = service.resolve_snapshot(args.id)
        image = asyncio.run(service.render_image(resolved.snapshot))
    except (NotFound, StorageError) as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except RenderFailure as exc:
        print(exc.diagnostic.as_text(), file=sys.stderr)
        return 1
    finally:
        database.dispose()

    args.output.write_bytes(image.content)
    print(f"Wrote {len(image.content)} bytes for snapshot {resolved.snapshot.id} to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
