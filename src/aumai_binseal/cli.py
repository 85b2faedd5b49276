"""CLI entry point for aumai-binseal."""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import click
from click.shell_completion import get_completion_class

from aumai_binseal.core import (
    DEFAULT_COMPRESSION_LEVEL,
    inspect_bundle,
    sign_file,
    verify_file,
)
from aumai_binseal.errors import IO_ERROR_EXIT_CODE, BinsealError
from aumai_binseal.keys import KeyManager
from aumai_binseal.models import Bundle

logger = logging.getLogger(__name__)

PROG_NAME = "binseal"
COMPLETION_SHELLS = ("bash", "zsh", "fish")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

T = TypeVar("T")

_LOAD_SCRIPT = """\
# Source this file to enable {prog} completion in bash or zsh.
# fish users: source {dir}/{prog}.fish instead.
case "$(basename "${{SHELL:-sh}}")" in
    zsh) . "{dir}/{prog}.zsh" ;;
    *) . "{dir}/{prog}.bash" ;;
esac
"""

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(action: Callable[[], T]) -> T:
    """Call *action*, turning known failures into a message and exit code."""
    try:
        return action()
    except BinsealError as exc:
        logger.debug("Command failed", exc_info=True)
        click.echo(f"Error [{exc.kind}]: {exc}", err=True)
        sys.exit(exc.exit_code)
    except OSError as exc:
        logger.debug("Command failed", exc_info=True)
        click.echo(f"Error [IOError]: {exc}", err=True)
        sys.exit(IO_ERROR_EXIT_CODE)


def _bundle_summary(bundle: Bundle) -> dict[str, object]:
    return {
        "format_version": bundle.format_version,
        "compression_level": bundle.compression_level,
        "header_size": bundle.header_size,
        "payload_length": bundle.payload_length,
        "signature": bundle.signature.hex(),
    }


def _report_elapsed(start: float) -> None:
    elapsed = time.perf_counter() - start
    minutes, secs = divmod(int(elapsed), 60)
    click.echo(f"Done in {minutes}m {secs}s (exactly {int(elapsed * 1000)}ms)")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="aumai-binseal")
@click.option("-v", "--verbose", is_flag=True, help="Log progress at INFO level.")
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging threshold (also read from LOG_LEVEL).",
)
def main(verbose: bool, log_level: str) -> None:
    """AumAI BinSeal: sign a file and bundle it with its signature."""
    level = logging.getLevelName(log_level.upper())
    if verbose:
        level = min(level, logging.INFO)
    logging.basicConfig(
        level=level, format="%(asctime)s - %(levelname)s - %(message)s"
    )


@main.command("sign")
@click.option(
    "-c",
    "--compression-level",
    type=int,
    default=DEFAULT_COMPRESSION_LEVEL,
    show_default=True,
    envvar="BINSEAL_COMPRESSION_LEVEL",
    help="Zstandard compression level (1-22).",
)
@click.argument("key_path", type=click.Path(dir_okay=False))
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.argument("output_file_path", required=False, type=click.Path(dir_okay=False))
def sign_command(
    compression_level: int,
    key_path: str,
    file_path: str,
    output_file_path: str | None,
) -> None:
    """Sign FILE_PATH with the secret key at KEY_PATH.

    The bundle is written to OUTPUT_FILE_PATH (default: FILE_PATH.sig).
    """
    start = time.perf_counter()
    out_path = _run(
        lambda: sign_file(file_path, key_path, output_file_path, compression_level)
    )
    click.echo(f"Signed bundle written to: {out_path}")
    _report_elapsed(start)


@main.command("verify")
@click.argument("key_path", type=click.Path(dir_okay=False))
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.argument("output_file_path", required=False, type=click.Path(dir_okay=False))
def verify_command(key_path: str, file_path: str, output_file_path: str | None) -> None:
    """Verify the bundle FILE_PATH with the public key at KEY_PATH and decode it.

    The recovered file is written to OUTPUT_FILE_PATH (default: FILE_PATH.ver).
    """
    start = time.perf_counter()
    out_path = _run(lambda: verify_file(file_path, key_path, output_file_path))
    click.echo("Signature: VALID")
    click.echo(f"Decoded file written to: {out_path}")
    _report_elapsed(start)


@main.command("generate")
@click.argument("path", type=click.Path(dir_okay=False))
@click.argument("public_path", required=False, type=click.Path(dir_okay=False))
def generate_command(path: str, public_path: str | None) -> None:
    """Generate a key pair: the secret key at PATH, the public key at PATH.pub."""
    start = time.perf_counter()
    secret_file, public_file = _run(
        lambda: KeyManager().generate_key_files(path, public_path)
    )
    click.echo("Key pair (ed25519) generated")
    click.echo(f"  Secret: {secret_file}")
    click.echo(f"  Public: {public_file}")
    _report_elapsed(start)


@main.command("inspect")
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.option("--json-output", is_flag=True, help="Emit JSON.")
def inspect_command(file_path: str, json_output: bool) -> None:
    """Display the header of a bundle without verifying it."""
    start = time.perf_counter()
    bundle = _run(lambda: inspect_bundle(file_path))

    if json_output:
        click.echo(json.dumps(_bundle_summary(bundle), indent=2))
        return

    click.echo(f"Format version   : {bundle.format_version}")
    click.echo(f"Compression level: {bundle.compression_level}")
    click.echo(f"Header size      : {bundle.header_size} bytes")
    click.echo(f"Payload length   : {bundle.payload_length:,} bytes")
    click.echo(f"Signature        : {bundle.signature.hex()}")
    _report_elapsed(start)


@main.command("build-complete")
@click.option(
    "--output-dir",
    default="complete",
    show_default=True,
    metavar="DIR",
    help="Directory to write the completion scripts to.",
)
def build_complete_command(output_dir: str) -> None:
    """Write shell completion scripts for every supported shell."""
    start = time.perf_counter()
    base_dir = Path(output_dir)
    complete_var = f"_{PROG_NAME.upper()}_COMPLETE"

    def build() -> None:
        base_dir.mkdir(parents=True, exist_ok=True)
        for shell in COMPLETION_SHELLS:
            completion_class = get_completion_class(shell)
            if completion_class is None:
                raise click.ClickException(f"no completion support for {shell}")
            source = completion_class(main, {}, PROG_NAME, complete_var).source()
            (base_dir / f"{PROG_NAME}.{shell}").write_text(source, encoding="utf-8")
            click.echo(f"Generated complete file of {PROG_NAME} for {shell}")
        (base_dir.parent / "load").write_text(
            _LOAD_SCRIPT.format(prog=PROG_NAME, dir=base_dir.as_posix()),
            encoding="utf-8",
        )

    _run(build)
    click.echo("Generated load script")
    _report_elapsed(start)


if __name__ == "__main__":
    main()
