"""
Command line entry point: make sure a development certificate exists.

Idempotent: mkcert only runs when the hosts changed or the files on disk no
longer match what was generated last time.
Run via: devcert [HOST ...]   or   python -m devcert.cli.main [HOST ...]

Options not given on the command line come from DEVCERT_* environment
variables or the YAML file named by DEVCERT_CONFIG_FILE (./devcert.yaml).
"""

import argparse
import asyncio
import subprocess
import sys

import httpx

from devcert.config import Settings, SourceName
from devcert.errors import DevcertError
from devcert.hosts import get_default_hosts, merge_hosts
from devcert.logging_config import configure_logging, get_logger
from devcert.mkcert import Mkcert

logger = get_logger("devcert.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devcert",
        description="Generate a locally-trusted development certificate with mkcert.",
    )
    parser.add_argument("hosts", nargs="*", help="Extra host names or IPs to include")
    parser.add_argument("--force", action="store_true", default=None, help="Always regenerate")
    parser.add_argument(
        "--auto-upgrade", action="store_true", default=None, help="Upgrade mkcert if outdated"
    )
    parser.add_argument("--source", choices=[s.value for s in SourceName], default=None)
    parser.add_argument("--mkcert-path", default=None, help="Use this mkcert binary")
    parser.add_argument("--save-path", default=None, help="Directory for binary and certificate")
    parser.add_argument(
        "--no-default-hosts",
        action="store_true",
        help="Do not add localhost and local IPv4 addresses",
    )
    parser.add_argument("--json-logs", action="store_true", default=None)
    parser.add_argument("--log-level", default=None)
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from env/YAML, with command line flags taking precedence."""
    overrides = {
        "force": args.force,
        "auto_upgrade": args.auto_upgrade,
        "source": args.source,
        "mkcert_path": args.mkcert_path,
        "save_path": args.save_path,
        "json_logs": args.json_logs,
        "log_level": args.log_level,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


async def run(settings: Settings, hosts: list[str]) -> Mkcert:
    mkcert = Mkcert.from_settings(settings)
    await mkcert.init()
    await mkcert.install(hosts)
    return mkcert


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args)
    configure_logging(json_logs=settings.json_logs, log_level=settings.log_level)

    defaults = [] if args.no_default_hosts else get_default_hosts()
    hosts = merge_hosts(defaults, settings.hosts, args.hosts)
    if not hosts:
        logger.error("No hosts to generate a certificate for")
        return 1

    try:
        mkcert = asyncio.run(run(settings, hosts))
    except subprocess.CalledProcessError as e:
        logger.error(
            "mkcert failed",
            returncode=e.returncode,
            stderr=(e.stderr or b"").decode(errors="replace").strip(),
        )
        return 1
    except (DevcertError, httpx.HTTPError, OSError) as e:
        logger.error("Could not provide a certificate", error=str(e))
        return 1

    print(mkcert.key_file_path)
    print(mkcert.cert_file_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
