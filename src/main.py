"""Headless globe tile streaming: rotate a virtual globe and save its texture."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from domain.models import StreamSettings
from domain.profiles import load_profile
from geo.projection import rotation_to_longitude
from imaging.reproject import render_equirectangular
from infrastructure.http.client import make_http_session
from services.stream_manager import TileStreamManager
from shared.constants import (
    FRAME_RATE_DEFAULT,
    MAP_TYPE_LABELS,
    ROTATION_SPEED_DEFAULT,
    MapType,
)
from tiles.fetcher import HttpImageFetcher

logger = logging.getLogger(__name__)


def setup_logging(log_file: Path | None = None, level: int = logging.INFO) -> None:
    """Configure application logging."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_file), encoding='utf-8'))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Stream map tiles for a rotating globe and save the texture'
    )
    parser.add_argument('--profile', help='TOML profile name or path')
    parser.add_argument(
        '--map-type',
        choices=[m.value for m in MapType],
        help='Override the map style from the profile',
    )
    parser.add_argument('--output', default='globe.png', help='Output image path')
    parser.add_argument(
        '--speed',
        type=float,
        default=ROTATION_SPEED_DEFAULT,
        help='Rotation speed, rad/s',
    )
    parser.add_argument('--fps', type=int, default=FRAME_RATE_DEFAULT)
    parser.add_argument(
        '--max-seconds',
        type=float,
        default=60.0,
        help='Stop after this many seconds even if tiles are missing',
    )
    parser.add_argument(
        '--mercator',
        action='store_true',
        help='Save the raw Mercator buffer instead of the equirectangular texture',
    )
    parser.add_argument('--log-file', type=Path)
    return parser


def resolve_settings(args: argparse.Namespace) -> StreamSettings:
    settings = load_profile(args.profile) if args.profile else StreamSettings()
    if args.map_type:
        settings = settings.model_copy(update={'map_type': MapType(args.map_type)})
    return settings


async def run_session(
    manager: TileStreamManager,
    *,
    speed: float,
    fps: int,
    max_seconds: float,
) -> None:
    """Drive ``update()`` like a render loop until everything loads or time runs out."""
    await manager.load_base_layer()
    logger.info('Base layer ready: %d%%', manager.get_base_progress())

    frame = 1.0 / max(fps, 1)
    rotation = 0.0
    elapsed = 0.0
    last_progress = -1
    while elapsed < max_seconds:
        manager.update(rotation_to_longitude(rotation))
        progress = manager.get_progress()
        if progress != last_progress:
            logger.info('Progress: %d%%', progress)
            last_progress = progress
        if progress >= 100:
            break
        await asyncio.sleep(frame)
        elapsed += frame
        rotation += speed * frame

    if manager.get_progress() < 100:
        logger.warning('Stopped at %d%% after %.1fs', manager.get_progress(), elapsed)


async def _main_async(args: argparse.Namespace) -> int:
    settings = resolve_settings(args)
    logger.info('Layer: %s', MAP_TYPE_LABELS[settings.map_type])
    async with make_http_session() as session:
        fetcher = HttpImageFetcher(session, timeout_s=settings.request_timeout_s)
        manager = TileStreamManager(fetcher, settings)
        try:
            await run_session(
                manager, speed=args.speed, fps=args.fps, max_seconds=args.max_seconds
            )
        finally:
            manager.destroy()

        image = (
            manager.buffer.to_image()
            if args.mercator
            else render_equirectangular(manager.buffer)
        )
        image.save(args.output)
        logger.info(
            'Saved %s (%dx%d), fetcher stats: %s',
            args.output,
            image.width,
            image.height,
            fetcher.stats,
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file)
    logger.info('Starting globe tile streaming')
    try:
        return asyncio.run(_main_async(args))
    except FileNotFoundError as e:
        logger.error('%s', e)
        return 1
    except KeyboardInterrupt:
        logger.info('Interrupted')
        return 130


if __name__ == '__main__':
    sys.exit(main())
