"""Command line for heirbox.

Start here with `python -m heirbox.frontend.cli.app` or the `heirbox` script:

    heirbox init --auth0-domain example.auth0.com --url https://box.example.com
    heirbox build
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from heirbox.core.builder import Builder
from heirbox.core.bundler import ParamsFileBundler
from heirbox.core.config import CONFIG_FILENAME, PASSPHRASE_ENV, Config
from heirbox.core.exceptions import HeirboxError
from heirbox.frontend.cli.logging_config import configure_logging

logger = logging.getLogger(__name__)

PARAMS_FILENAME = "heirbox-params.json"


def _read_passphrase() -> str:
    # Non-interactive builds take the passphrase from the environment.
    passphrase = os.getenv(PASSPHRASE_ENV)
    if passphrase:
        return passphrase

    passphrase = getpass.getpass("Passphrase: ")
    if not passphrase:
        raise HeirboxError("Passphrase must not be empty")
    confirm = getpass.getpass("Confirm passphrase: ")
    if passphrase != confirm:
        raise HeirboxError("Passphrases do not match")
    return passphrase


def cmd_init(args: argparse.Namespace) -> int:
    cwd = Path.cwd()
    if any(cwd.iterdir()):
        logger.error("Directory %s isn't empty; aborting", cwd)
        return 1

    content_dir = (cwd / args.content).resolve()
    dist_dir = (cwd / args.dist).resolve()
    content_dir.mkdir(parents=True)
    dist_dir.mkdir(parents=True)

    config = Config.create(
        content_dir=content_dir,
        dist_dir=dist_dir,
        auth0_domain=args.auth0_domain,
        auth0_client_id=args.auth0_client_id,
        urls=args.url or [],
    )
    config.save(cwd / CONFIG_FILENAME)
    print("Project initialized")
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    config_path = Path(args.config)
    config = Config.load(config_path)

    params_out = Path(args.params_out) if args.params_out else config_path.resolve().parent / PARAMS_FILENAME
    bundler = ParamsFileBundler(params_out, dist_dir=config.dist_dir)

    # Resolve the KDF before prompting so a bad project file fails fast
    config.resolve_kdf()
    passphrase = _read_passphrase()

    session = Builder(passphrase, config, bundler=bundler).build()

    if session.has_errors:
        print("Build completed with errors", file=sys.stderr)
        return 1
    print(f"Build completed: {len(session.content)} files in {config.dist_dir}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heirbox",
        description="Package a directory of personal files into encrypted blobs.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init", help="initialize a new project in the current directory")
    p_init.add_argument("-i", "--content", default="content", help="directory with content")
    p_init.add_argument("-o", "--dist", default="dist", help="directory where output is saved")
    p_init.add_argument("-d", "--auth0-domain", default=None, help='Auth0 domain (e.g. "me.auth0.com")')
    p_init.add_argument("-c", "--auth0-client-id", default=None, help="Auth0 client ID of the viewer app")
    p_init.add_argument("-u", "--url", action="append", help="URL the box is deployed to (repeatable)")
    p_init.set_defaults(func=cmd_init)

    p_build = sub.add_parser("build", help="encrypt the content directory into dist")
    p_build.add_argument("--config", default=CONFIG_FILENAME, help="path to the project file")
    p_build.add_argument(
        "--params-out",
        default=None,
        help=f"where to write build parameters (default: {PARAMS_FILENAME} next to the project file)",
    )
    p_build.set_defaults(func=cmd_build)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        return args.func(args)
    except HeirboxError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
