#!/usr/bin/env python3
"""
SponsorLink Command Line Interface

Usage:
    sponsorlink keygen --output <key.pem> [--public <file.pub>]
    sponsorlink create --salt <salt> --user <user> [--email E]... [--domain D]... [--sponsor A]...
    sponsorlink sign --key <key.pem> [--token <jwt>]
    sponsorlink verify [--token <jwt>] [--salt <salt>] [--public-key <key>]
    sponsorlink check <identifier> <account>
    sponsorlink hash --salt <salt> <identifier> <account>
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import config
from .constants import INSTALLATION_ID_VARIABLE, MANIFEST_VARIABLE
from .errors import ManifestError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def _read_key_arg(value: str) -> str:
    """Key arguments may be a file path or the key material itself."""
    path = Path(value).expanduser()
    try:
        if path.is_file():
            return path.read_text(encoding="utf-8")
    except OSError:
        # base64 key material can exceed the maximum file name length
        pass
    return value


def _read_token_arg(value: Optional[str]) -> Optional[str]:
    if value == "-":
        return sys.stdin.read().strip()
    return value


def cmd_keygen(args) -> int:
    """Generate an RSA signing key."""
    from .keys import export_private_key, export_public_key, generate_private_key

    key = generate_private_key(args.key_size)

    output = Path(args.output)
    output.write_text(export_private_key(key), encoding="utf-8")
    print(f"Private key saved to: {output}", file=sys.stderr)

    public = export_public_key(key)
    if args.public:
        Path(args.public).write_text(public + "\n", encoding="utf-8")
        print(f"Public key saved to: {args.public}", file=sys.stderr)
    else:
        print(public)
    return 0


def cmd_create(args) -> int:
    """Create an unsigned manifest token."""
    from .manifest import create

    manifest = create(args.salt, args.user, args.email, args.domain, args.sponsor)
    print(manifest.token)
    print(f"{len(manifest.hashes)} hashes, expires {manifest.expires_at.isoformat()}", file=sys.stderr)
    return 0


def cmd_sign(args) -> int:
    """Sign a manifest token."""
    from .signing import sign

    token = _read_token_arg(args.token) if args.token else sys.stdin.read().strip()
    key = _read_key_arg(args.key)

    try:
        signed = sign(token, key)
    except ManifestError as e:
        print(f"✗ {e.reason}", file=sys.stderr)
        return 1

    print(signed)
    return 0


def cmd_verify(args) -> int:
    """Verify a manifest token and print its status."""
    from .store import MemoryStore
    from .verifier import check

    store = config.get_default_store()
    token = _read_token_arg(args.token) or store.token
    salt = args.salt or store.salt

    values = {}
    if token:
        values[MANIFEST_VARIABLE] = token
    if salt:
        values[INSTALLATION_ID_VARIABLE] = salt

    public_key = _read_key_arg(args.public_key) if args.public_key else None
    result = check(MemoryStore(values), public_key)

    if result.is_verified():
        manifest = result.manifest
        print(f"✓ {result.status.value}")
        print(f"  Hashes: {len(manifest.hashes)}")
        print(f"  Expires: {manifest.expires_at.isoformat()}")
        return 0

    print(f"✗ {result.status.value}: {result.reason}")
    return 1


def cmd_check(args) -> int:
    """Check a sponsorship against the stored manifest."""
    from .verifier import check

    result = check()
    sponsoring = result.is_sponsoring(args.identifier, args.account)

    if sponsoring is None:
        print(f"✗ {result.status.value}: {result.reason}", file=sys.stderr)
        return 2

    if sponsoring:
        print(f"✓ {args.identifier} sponsors {args.account}")
        return 0

    print(f"✗ {args.identifier} does not sponsor {args.account}")
    return 1


def cmd_hash(args) -> int:
    """Print the membership digest for an identifier/account pair."""
    from .hashing import digest

    print(digest(args.salt, args.identifier, args.account))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sponsorlink",
        description="SponsorLink manifest CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sponsorlink keygen -o issuer.pem --public issuer.pub
  sponsorlink create -s SALT -u kzu -e me@acme.com -d acme.com -S devlooped
  sponsorlink create ... | sponsorlink sign -k issuer.pem
  sponsorlink verify -t TOKEN -s SALT -p issuer.pub
  sponsorlink check me@acme.com devlooped
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # keygen
    keygen_parser = subparsers.add_parser("keygen", help="Generate RSA signing key")
    keygen_parser.add_argument("-o", "--output", required=True, help="Output PEM file for the private key")
    keygen_parser.add_argument("--public", help="Output file for the base64 DER public key")
    keygen_parser.add_argument("--key-size", type=int, default=config.DEFAULT_KEY_SIZE, help="RSA key size in bits")

    # create
    create_parser = subparsers.add_parser("create", help="Create unsigned manifest")
    create_parser.add_argument("-s", "--salt", required=True, help="Installation salt")
    create_parser.add_argument("-u", "--user", required=True, help="Manifest owner")
    create_parser.add_argument("-e", "--email", action="append", default=[], help="Owner email (repeatable)")
    create_parser.add_argument("-d", "--domain", action="append", default=[], help="Verified domain (repeatable)")
    create_parser.add_argument("-S", "--sponsor", action="append", default=[], help="Sponsored account (repeatable)")

    # sign
    sign_parser = subparsers.add_parser("sign", help="Sign manifest token")
    sign_parser.add_argument("-k", "--key", required=True, help="Private key PEM file")
    sign_parser.add_argument("-t", "--token", help="Token to sign (default: stdin)")

    # verify
    verify_parser = subparsers.add_parser("verify", help="Verify manifest token")
    verify_parser.add_argument("-t", "--token", help="Token to verify, '-' for stdin (default: stored token)")
    verify_parser.add_argument("-s", "--salt", help="Installation salt (default: stored salt)")
    verify_parser.add_argument("-p", "--public-key", help="Public key file or base64 DER (default: embedded key)")

    # check
    check_parser = subparsers.add_parser("check", help="Check sponsorship with stored manifest")
    check_parser.add_argument("identifier", help="Email or domain")
    check_parser.add_argument("account", help="Sponsored account")

    # hash
    hash_parser = subparsers.add_parser("hash", help="Compute membership digest")
    hash_parser.add_argument("-s", "--salt", required=True, help="Installation salt")
    hash_parser.add_argument("identifier", help="Email or domain")
    hash_parser.add_argument("account", help="Sponsored account")

    return parser


COMMANDS = {
    "keygen": cmd_keygen,
    "create": cmd_create,
    "sign": cmd_sign,
    "verify": cmd_verify,
    "check": cmd_check,
    "hash": cmd_hash,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose or config.is_debug() else config.LOG_LEVEL
    configure_logging(level, json_format=config.LOG_FORMAT == "json")

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 0
    logger.debug("Running %s", args.command)
    return command(args)


if __name__ == "__main__":
    sys.exit(main())
