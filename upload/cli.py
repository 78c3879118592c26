"""
Throttled Upload - Command Line

Upload one video to YouTube with an optional bandwidth cap.

Usage:
    throttled-upload -f video.mp4 -t "My Video"                 # Unlimited
    throttled-upload -f video.mp4 -r 8000                       # Cap at 8 Mbps
    throttled-upload -f video.mp4 -r 8000 --limit-between 09:00-17:00
    throttled-upload -f video.mp4 --meta-json video.json -q     # Quiet progress
    cat video.mp4 | throttled-upload -f - -t "From a pipe"      # Read stdin
    throttled-upload -f https://example.com/video.mp4          # Stream a URL

In quiet mode, send SIGUSR1 to print the current progress:
    kill -USR1 <pid>

Exit codes:
    0 - Upload successful
    1 - Invalid configuration or upload failed
    130 - Interrupted
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from config.settings import LOG_FORMAT, LOG_LEVEL, UPLOAD_CHUNK_SIZE
from throttle.config import ThrottleConfig
from throttle.errors import ConfigurationError
from upload import __version__
from upload.constants import PRIVACY_STATUSES, STDIN_SOURCE
from upload.controllers.upload_controller import UploadController
from upload.factory import UploaderFactory
from upload.models.video_metadata import VideoMetadata
from upload.utils.source_utils import is_remote

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser"""
    parser = argparse.ArgumentParser(
        prog="throttled-upload",
        description="Upload a video to YouTube with an optional bandwidth cap",
        epilog="""
Examples:
  %(prog)s -f video.mp4 -t "Holiday"                  # Upload at full speed
  %(prog)s -f video.mp4 -r 8000                       # Cap at 8000 kbps
  %(prog)s -f video.mp4 -r 8000 --limit-between 09:00-17:00
                                                      # Cap during office hours only
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Video
    parser.add_argument(
        "-f",
        "--filename",
        required=True,
        help='Video file, http(s) URL, or "-" to read standard input',
    )
    parser.add_argument(
        "-t",
        "--title",
        help='Video title (default: file name, "stdin" for a pipe)',
    )
    parser.add_argument("-d", "--description", help="Video description")
    parser.add_argument("--tags", help="Comma separated list of video tags")
    parser.add_argument("--category-id", help="Video category ID")
    parser.add_argument(
        "--privacy",
        choices=PRIVACY_STATUSES,
        help="Video privacy status (default: private)",
    )
    parser.add_argument(
        "--language",
        help="Video language, also used for captions (default: en)",
    )
    parser.add_argument(
        "--playlist-id",
        action="append",
        default=[],
        dest="playlist_ids",
        help="Add the video to this playlist (repeatable)",
    )
    parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Don't notify channel subscribers",
    )

    # Metadata files
    parser.add_argument(
        "--meta-json",
        help="JSON file with video metadata (its values win over flags)",
    )
    parser.add_argument(
        "--meta-json-out",
        help="Write the created video resource to this JSON file",
    )
    parser.add_argument("--thumbnail", help="Thumbnail image (path or URL) to upload")
    parser.add_argument("--caption", help="Caption file (path or URL) to upload")

    # Throttling
    parser.add_argument(
        "-r",
        "--ratelimit",
        type=int,
        help="Rate limit upload in kbps (default: no limit)",
    )
    parser.add_argument(
        "--limit-between",
        help='Only rate limit between these local times, e.g. "10:00-14:00"',
    )
    parser.add_argument(
        "--config",
        help="YAML throttle config file (default: config/throttle.yaml)",
    )

    # Transfer
    parser.add_argument(
        "--chunksize",
        type=int,
        default=UPLOAD_CHUNK_SIZE,
        help=f"Bytes per upload request, 0 = whole file (default: {UPLOAD_CHUNK_SIZE})",
    )
    parser.add_argument(
        "--wait-timeout",
        type=float,
        help="Fail if the rate limit stalls a read longer than this many seconds",
    )
    parser.add_argument(
        "--no-send-filename",
        action="store_true",
        help="Don't send the file name to YouTube",
    )

    # Output
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress periodic progress (SIGUSR1 still prints it)",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Simulate the upload locally (no YouTube credentials needed)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def setup_logging(debug: bool = False) -> None:
    """Configure root logger"""
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def metadata_from_args(args: argparse.Namespace) -> VideoMetadata:
    """
    Collect metadata given as flags.

    Returns:
        VideoMetadata with unset flags left blank
    """
    tags: List[str] = []
    if args.tags and args.tags.strip():
        tags = [tag.strip() for tag in args.tags.split(",") if tag.strip()]

    return VideoMetadata(
        title=args.title or "",
        description=args.description or "",
        tags=tags,
        category_id=args.category_id or "",
        privacy_status=args.privacy or "",
        language=args.language or "",
        playlist_ids=list(args.playlist_ids),
        notify_subscribers=not args.no_notify,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)

    # Validate everything before any network activity
    try:
        throttle_config = ThrottleConfig(
            config_path=args.config,
            overrides={
                "rate_limit_kbps": args.ratelimit,
                "limit_between": args.limit_between,
                "quiet": args.quiet or None,
                "wait_timeout": args.wait_timeout,
            },
        )
    except ConfigurationError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return 1

    is_file = args.filename != STDIN_SOURCE and not is_remote(args.filename)
    if is_file and not os.path.isfile(args.filename):
        logger.error(f"❌ Video file not found: {args.filename}")
        return 1

    try:
        uploader = UploaderFactory.create_uploader(
            mode="mock" if args.mock else "youtube",
            throttle_config=throttle_config,
            chunk_size=args.chunksize,
            send_filename=not args.no_send_filename,
        )
    except RuntimeError as e:
        logger.error(f"❌ Failed to initialize uploader: {e}")
        return 1

    controller = UploadController(uploader=uploader)

    if args.filename == STDIN_SOURCE:
        print("Uploading file from pipe")
    else:
        print(f"Uploading file {args.filename!r}")

    try:
        result = controller.upload_video(
            video_path=args.filename,
            metadata=metadata_from_args(args),
            metadata_json_path=args.meta_json,
            thumbnail_path=args.thumbnail,
            caption_path=args.caption,
            metadata_out_path=args.meta_json_out,
        )
    except KeyboardInterrupt:
        logger.warning("Upload interrupted")
        return 130

    if not result.success:
        return 1

    print(f"Upload successful! Video ID: {result.video_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
