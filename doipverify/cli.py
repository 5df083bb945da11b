"""
doip-verify command line interface.

Fetches a decentralized identity profile, authenticates it and checks every
identity claim it makes.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from rich.console import Console

from doipverify.aspe.profile import verify_aspe_profile
from doipverify.aspe.uri import is_aspe_uri
from doipverify.config import KEYSERVER_DOMAIN, VerifierConfig
from doipverify.errors import DoipError, ProfileNotProvided, ProfileURIMalformed, Unimplemented
from doipverify.providers import HttpClaimChecker
from doipverify.render import PrintFormat, print_profile

KEY_URI_PREFIXES = ("hkps:", "hkp:", "wkd:")


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging based on verbosity."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='doip-verify',
        description='Verify the identity claims of a decentralized identity profile'
    )
    parser.add_argument('-a', '--aspe-uri', help='ASPE profile URI (aspe:<domain>:<fingerprint>)')
    parser.add_argument(
        '-f', '--fetch-key-uri',
        help='URI for looking up an OpenPGP key (hkp:<email|fingerprint> or wkd:<email>)'
    )
    parser.add_argument(
        '-k', '--keyserver-domain',
        help='Keyserver used for hkp lookups (default: keys.openpgp.org)'
    )
    parser.add_argument('-i', '--input-key-file', help='Path to an ASCII-armored public key')
    parser.add_argument(
        '-p', '--print-format',
        choices=[f.value for f in PrintFormat],
        default=PrintFormat.TEXT.value,
        help='Output format'
    )
    parser.add_argument(
        '-s', '--skip-verify-ssl', action='store_true',
        help='Skip TLS certificate validation for the profile fetch'
    )
    parser.add_argument('-q', '--quiet', action='store_true', help='Do not print claim warnings')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
    return parser


async def cmd_aspe(args: argparse.Namespace, config: VerifierConfig, console: Console) -> int:
    """Fetch, verify and print an ASPE profile."""
    async with HttpClaimChecker(config) as checker:
        profile = await verify_aspe_profile(args.aspe_uri, checker, config=config)
    print_profile(profile, PrintFormat(args.print_format), console=console)
    return 0


async def run(args: argparse.Namespace, console: Optional[Console] = None) -> int:
    """Dispatch parsed arguments to the matching profile source."""
    console = console or Console()
    config = VerifierConfig.from_env(
        skip_verify_ssl=args.skip_verify_ssl,
        warnings_enabled=False if args.quiet else None,
    )

    if args.aspe_uri:
        if not is_aspe_uri(args.aspe_uri):
            raise ProfileURIMalformed(f"Not an aspe URI: {args.aspe_uri}")
        return await cmd_aspe(args, config, console)

    if args.fetch_key_uri:
        if not args.fetch_key_uri.startswith(KEY_URI_PREFIXES):
            raise ProfileURIMalformed(f"Unrecognized key URI: {args.fetch_key_uri}")
        if args.fetch_key_uri.startswith("wkd:"):
            source = "Web Key Directory"
        else:
            source = f"keyserver {args.keyserver_domain or KEYSERVER_DOMAIN}"
        raise Unimplemented(
            help=f"OpenPGP key lookup via {source} requires certificate parsing, which is not bundled"
        )

    if args.input_key_file:
        raise Unimplemented(help="Reading OpenPGP key files requires certificate parsing, which is not bundled")

    raise ProfileNotProvided()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.quiet)

    try:
        return asyncio.run(run(args))
    except DoipError as e:
        print(f"Error: {e.describe()}", file=sys.stderr)
        return e.exit_code


if __name__ == '__main__':
    sys.exit(main())
