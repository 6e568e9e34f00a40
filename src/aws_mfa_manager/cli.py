from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from ._version import __version__
from .config_loader import (
    DEFAULT_CREDENTIALS_FILE,
    DEFAULT_LONG_TERM_SUFFIX,
    DEFAULT_SHORT_TERM_SUFFIX,
    Inputs,
    load_env_file,
)
from .errors import MfaError
from .refresher import CredentialRefresher

logger = logging.getLogger("aws-mfa-cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="aws-mfa-manager",
        description="Refresh AWS credentials using MFA (writes to ~/.aws/credentials)",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="AWS profile name (env: AWS_PROFILE, default: default)",
    )
    parser.add_argument(
        "--device",
        default=None,
        help="MFA device ARN/serial (env: MFA_DEVICE, or aws_mfa_device in long-term section)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=None,
        help="STS session duration seconds (env: MFA_STS_DURATION, default: 43200)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="MFA token code (6 digits). If omitted, prompts on stdin",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Refresh credentials even if still valid",
    )
    parser.add_argument(
        "--long-term-suffix",
        default=DEFAULT_LONG_TERM_SUFFIX,
        help="Suffix for long-term section (<profile>-<suffix>). Use 'none' for <profile>",
    )
    parser.add_argument(
        "--short-term-suffix",
        default=DEFAULT_SHORT_TERM_SUFFIX,
        help="Suffix for short-term section (<profile>-<suffix>). Use 'none' for <profile>",
    )
    parser.add_argument(
        "--credentials-file",
        default=DEFAULT_CREDENTIALS_FILE,
        help="Path to shared credentials file",
    )
    parser.add_argument(
        "--region",
        default=None,
        help="STS region (env: AWS_REGION, AWS_DEFAULT_REGION, default: us-east-1)",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Optional dotenv file loaded before resolving (never overrides the environment)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=__version__)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s - %(message)s",
    )

    inputs = Inputs(
        profile=args.profile,
        device=args.device,
        duration_seconds=args.duration,
        token=args.token,
        force=args.force,
        long_term_suffix=args.long_term_suffix,
        short_term_suffix=args.short_term_suffix,
        credentials_file=args.credentials_file,
    )
    try:
        load_env_file(args.env_file)
        CredentialRefresher().refresh_once(inputs, region=args.region)
    except MfaError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
