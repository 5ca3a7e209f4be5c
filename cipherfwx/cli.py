"""Command line host: encrypt or decrypt a single text argument."""

import argparse
import os
import sys
import warnings

from .algorithms import ALGORITHMS
from .buffer import Hex, Utf8
from .entropy import UnavailableRandomSource, resolve_random_source, set_default_random_source
from .errors import CipherError, PaddingWarning, RandomSourceUnavailable
from .formats import FORMATS
from .hashers import HASHERS
from .modes import MODES
from .padding import PADDINGS
from .serializable import Password, RawKey, create_helper
from .version import __version__


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cipherfwx", description="Streaming symmetric cipher toolkit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text, text_help in (
        ("encrypt", "Encrypt text and print the OpenSSL-style container", "Plaintext (UTF-8)"),
        ("decrypt", "Decrypt a container and print the UTF-8 plaintext", "Base64 container text"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("text", help=text_help)
        key_group = sub.add_mutually_exclusive_group(required=True)
        key_group.add_argument("-p", "--password", help="Password; key and IV are derived with the KDF")
        key_group.add_argument("-k", "--key", help="Raw key given as UTF-8 text (16, 24 or 32 bytes for AES)")
        key_group.add_argument("--key-hex", help="Raw key given as hex")
        sub.add_argument("--algorithm", choices=sorted(ALGORITHMS), default="aes")
        sub.add_argument("--mode", choices=sorted(MODES), default=None)
        sub.add_argument("--padding", choices=sorted(PADDINGS), default=None)
        sub.add_argument("--format", choices=sorted(FORMATS), default=None)
        sub.add_argument("--hasher", choices=sorted(HASHERS), default=None, help="Digest used by the KDF")
        sub.add_argument("--iterations", type=int, default=None, help="KDF iteration count")
        sub.add_argument("--iv", default=None, help="Initialization vector as hex (raw key only)")
        sub.add_argument("--salt", default=None, help="KDF salt as hex (password only)")
        sub.add_argument("--silent", action="store_true", help="Suppress padding warnings")
    return parser


def _install_random_source() -> None:
    try:
        set_default_random_source(resolve_random_source())
    except RandomSourceUnavailable:
        # raw-key operations still work; anything needing a salt will fail
        set_default_random_source(UnavailableRandomSource())


def cli(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _install_random_source()
    with warnings.catch_warnings():
        if args.silent or os.getenv("CIPHERFWX_SILENT") == "1":
            warnings.simplefilter("ignore", PaddingWarning)
        return _run(args)


def _run(args) -> int:
    helper = create_helper(ALGORITHMS[args.algorithm])
    try:
        if args.password is not None:
            key = Password(args.password)
        elif args.key is not None:
            key = RawKey(Utf8.parse(args.key))
        else:
            key = RawKey(Hex.parse(args.key_hex))
        cfg = {
            "mode": args.mode,
            "padding": args.padding,
            "format": args.format,
            "hasher": args.hasher,
            "iterations": args.iterations,
            "iv": Hex.parse(args.iv) if args.iv else None,
            "salt": Hex.parse(args.salt) if args.salt else None,
        }
        if args.command == "encrypt":
            print(str(helper.encrypt(args.text, key, cfg)))
        else:
            print(Utf8.stringify(helper.decrypt(args.text, key, cfg)))
    except CipherError as exc:
        print(f"FAIL! {exc}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    return cli(argv)


if __name__ == "__main__":
    raise SystemExit(main())
