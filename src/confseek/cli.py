"""Command-line interface for file encryption and format conversion.

Usage:
    confseek encrypt config/app.json --env production
    confseek decrypt config/app.json.encrypted --key base64:...
    confseek convert settings.yaml settings.toml
"""

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from . import __version__
from .exceptions import ConfigError
from .manager import ENCRYPTED_SUFFIX
from .manager import ConfigManager
from .models import EnvStyle

logger = logging.getLogger(__name__)

ENV_STYLES = [style.value for style in EnvStyle]


def register_encrypt_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="File or directory to encrypt")
    parser.add_argument("--key", help="Encryption key (base64:... or raw); generated when omitted")
    parser.add_argument("--cipher", help="Cipher name (default: AES-256-CBC)")
    parser.add_argument("--env", help="Environment name (e.g. production)")
    parser.add_argument("--env-style", choices=ENV_STYLES, help="Environment file layout")
    parser.add_argument("--prune", action="store_true", help="Delete plaintext files after encrypting")
    parser.add_argument("--force", action="store_true", help="Overwrite existing encrypted files")
    parser.add_argument("--recursive", action="store_true", help="Descend into subdirectories")
    parser.add_argument("--glob", default="*", help="File name pattern for directories (default: *)")


def register_decrypt_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Encrypted file or directory")
    parser.add_argument("--key", required=True, help="Decryption key (base64:... or raw)")
    parser.add_argument("--cipher", help="Cipher name (default: AES-256-CBC)")
    parser.add_argument("--env", help="Environment name (e.g. production)")
    parser.add_argument("--env-style", choices=ENV_STYLES, help="Environment file layout")
    parser.add_argument("--path", dest="output_dir", help="Directory to write decrypted files to")
    parser.add_argument("--filename", help="Name of the decrypted file")
    parser.add_argument("--keep", action="store_true", help="Keep encrypted files after decrypting")
    parser.add_argument("--force", action="store_true", help="Overwrite existing decrypted files")
    parser.add_argument("--recursive", action="store_true", help="Descend into subdirectories")


def register_convert_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source", help="Configuration file to read")
    parser.add_argument("destination", help="File to write; its extension selects the format")


def run_encrypt(manager: ConfigManager, args: argparse.Namespace) -> int:
    path = Path(args.path)
    if path.is_dir():
        pattern = f"**/{args.glob}" if args.recursive else args.glob
        targets = [p for p in sorted(path.glob(pattern)) if p.is_file() and not p.name.endswith(ENCRYPTED_SUFFIX)]
    else:
        targets = [path]

    if not targets:
        print(f"No files to encrypt in {path}", file=sys.stderr)
        return 0

    # One key for the whole batch so the files can be decrypted together
    key = args.key
    for target in targets:
        result = manager.encrypt(
            target,
            key=key,
            cipher=args.cipher,
            prune=args.prune,
            force=args.force,
            env=args.env,
            env_style=args.env_style,
        )
        key = result.key
        print(f"Encrypted {result.path}")

    print(f"Key: {key}")
    return 0


def run_decrypt(manager: ConfigManager, args: argparse.Namespace) -> int:
    path = Path(args.path)
    if path.is_dir():
        pattern = f"**/*{ENCRYPTED_SUFFIX}" if args.recursive else f"*{ENCRYPTED_SUFFIX}"
        targets = [p for p in sorted(path.glob(pattern)) if p.is_file()]
    else:
        targets = [path]

    for target in targets:
        output = manager.decrypt(
            target,
            args.key,
            force=args.force,
            cipher=args.cipher,
            output_dir=args.output_dir,
            filename=args.filename,
            env=args.env,
            prune=not args.keep,
            env_style=args.env_style,
        )
        print(f"Decrypted {output}")
    return 0


def run_convert(manager: ConfigManager, args: argparse.Namespace) -> int:
    manager.convert(args.source, args.destination)
    print(f"Converted {args.source} to {args.destination}")
    return 0


COMMANDS: dict[str, tuple[str, Callable[[argparse.ArgumentParser], None], Callable[..., int]]] = {
    "encrypt": ("Encrypt configuration files", register_encrypt_args, run_encrypt),
    "decrypt": ("Decrypt configuration files", register_decrypt_args, run_decrypt),
    "convert": ("Convert a configuration file to another format", register_convert_args, run_convert),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="confseek", description="Configuration file tooling")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (summary, register, _) in COMMANDS.items():
        register(subparsers.add_parser(name, help=summary, description=summary))
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code: 0 on success, 1 on configuration errors
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    _, _, run = COMMANDS[args.command]
    try:
        return run(ConfigManager(), args)
    except ConfigError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
