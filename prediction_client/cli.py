"""
Upload an image to the prediction service and print the result.

Usage:
    prediction-client capture.jpg \
        --server live \
        --poll-interval 0.5 \
        --lock-timeout 30
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import Settings
from .notifications import LoggingNotifier
from .outcome import Failure
from .presentation import build_result_view, format_result
from .schemas import encode_prediction
from .uploader import PredictionUploader


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Upload an image to the prediction service'
    )
    parser.add_argument('image', type=str, help='Path of the image to upload')
    parser.add_argument(
        '--server', choices=['development', 'live'], default=None,
        help='Server to use (default: from PREDICT_SERVER or development)'
    )
    parser.add_argument(
        '--poll-interval', type=float, default=None,
        help='Seconds between lock probes while the file is held (default: 0.5)'
    )
    parser.add_argument(
        '--lock-timeout', type=float, default=None,
        help='Give up after waiting this many seconds for a lock (default: wait forever)'
    )
    parser.add_argument(
        '--json', action='store_true',
        help='Print the full decoded response as JSON'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Enable debug logging'
    )
    return parser


def build_uploader(args: argparse.Namespace) -> PredictionUploader:
    """Create an uploader from settings overridden by command-line flags."""
    overrides = {}
    if args.server is not None:
        overrides['server'] = args.server
    if args.poll_interval is not None:
        overrides['poll_interval'] = args.poll_interval
    if args.lock_timeout is not None:
        overrides['lock_timeout'] = args.lock_timeout

    return PredictionUploader(settings=Settings(**overrides), notifier=LoggingNotifier())


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else Settings().log_level
    logging.basicConfig(
        level=level,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )

    with build_uploader(args) as uploader:
        outcome = uploader.predict(args.image)

    if isinstance(outcome, Failure):
        print(f"Upload failed ({outcome.reason.value}): {outcome.message}")
        return 1

    if args.json:
        print(json.dumps(json.loads(encode_prediction(outcome.response)), indent=2))
    else:
        print(format_result(build_result_view(outcome.response)))
    return 0


if __name__ == '__main__':
    sys.exit(main())
