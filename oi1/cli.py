import sys
import argparse
import logging
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from . import __version__
from .codec import OI1Codec
from .errors import OI1Error
from .trace import TraceStage

logger = logging.getLogger("oi1")


def setup_logging(verbose: bool) -> None:
    """Quiet by default; --verbose surfaces info and warnings on stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.INFO if verbose else logging.ERROR)
    logger.propagate = False


# ==========================================
#  RENDERING
# ==========================================

def render_trace(console: Console, stages: List[TraceStage]) -> None:
    table = Table(box=box.SIMPLE, show_lines=True, title="Step trace")
    table.add_column("#", justify="right")
    table.add_column("Stage", style="bold")
    table.add_column("Input", overflow="fold")
    table.add_column("Output", overflow="fold")
    table.add_column("Detail", overflow="fold", style="dim")
    for stage in stages:
        table.add_row(str(stage.index), stage.title, stage.input, stage.output, stage.technical)
    console.print(table)


def render_stats(console: Console, codec: OI1Codec, plaintext: str, ciphertext: str) -> None:
    stats = codec.get_encoding_stats(plaintext, ciphertext)
    table = Table(box=box.SIMPLE, show_header=False, title="Encoding stats")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Characters", str(stats.original_length))
    table.add_row("UTF-8 bytes", str(stats.original_bytes))
    table.add_row("Cipher length", str(stats.cipher_length))
    if stats.bytes_ratio is not None:
        table.add_row("Symbols per byte", f"{stats.bytes_ratio:.2f}")
    table.add_row("Format", stats.format_version)
    if stats.checksum is not None:
        table.add_row("CRC32", f"0x{stats.checksum:08X} ({stats.checksum_symbols})")
    spread = "  ".join(
        f"{sym}: {count} ({stats.distribution.percentages[sym]}%)"
        for sym, count in stats.distribution.counts.items()
    )
    table.add_row("Distribution", spread)
    console.print(table)


def render_quality(console: Console, codec: OI1Codec, ciphertext: str) -> None:
    report = codec.assess_quality(ciphertext)
    console.print(f"Quality: {report.quality}/100")
    for issue in report.issues:
        console.print(f"  - {issue}")
    for hint in report.recommendations:
        console.print(f"  * {hint}")


# ==========================================
#  CLI LOGIC
# ==========================================

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oi1",
        description="O0Il visual-confusion codec (v2 with CRC32, reads legacy v1)",
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Main action group
    action_group = parser.add_mutually_exclusive_group(required=True)
    action_group.add_argument("-e", "--encode", action="store_true", help="Encode mode")
    action_group.add_argument("-d", "--decode", action="store_true", help="Decode mode")
    action_group.add_argument("--validate", action="store_true",
                              help="Check that the input only uses O0Il symbols")
    action_group.add_argument("--detect", action="store_true",
                              help="Report the wire format inferred from the input length")
    action_group.add_argument("--stats", action="store_true",
                              help="Encode the input and print length/ratio/checksum statistics")
    action_group.add_argument("--quality", action="store_true",
                              help="Score how well a ciphertext hides its content (advisory)")

    parser.add_argument("--trace", action="store_true",
                        help="Print every transform stage (encode/decode only)")

    # Verbose output
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose output (info and warning messages)")

    # I/O options
    io_group = parser.add_mutually_exclusive_group()
    io_group.add_argument("-t", "--text", help="Direct text input")
    io_group.add_argument("-i", "--input", help="Input file path")

    parser.add_argument("-o", "--output", help="Output file path")

    return parser


def read_source(args) -> str:
    if args.text is not None:
        return args.text
    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            return f.read()
    if not sys.stdin.isatty():
        return sys.stdin.read()

    print("[OI1] Paste input below. Ctrl+D (Unix) or Ctrl+Z (Win) to end:", file=sys.stderr)
    return sys.stdin.read()


def write_result(args, result: str) -> None:
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result)
            if args.decode: f.write("\n")
    else:
        print(result)


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.trace and not (args.encode or args.decode):
        logger.warning("--trace only applies to --encode and --decode; ignoring it.")

    # 1. READ INPUT
    try:
        source_text = read_source(args)
    except FileNotFoundError:
        print(f"Error: File '{args.input}' not found.", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0

    codec = OI1Codec()
    console = Console(stderr=bool(args.output), markup=False, highlight=False)

    # 2. RUN ACTION
    if args.encode:
        try:
            result = codec.encode(source_text)
        except OI1Error as e:
            print(f"Encode Error: {e}", file=sys.stderr)
            return 1
        logger.info(f"Encoded {len(source_text)} character(s) into {len(result)} symbols.")
        if args.trace:
            render_trace(console, codec.generate_encoding_trace(source_text))

    elif args.decode:
        clean_text = source_text.strip()
        if args.trace:
            render_trace(console, codec.generate_decoding_trace(clean_text))
        try:
            decoded = codec.decode(clean_text)
        except OI1Error as e:
            print(f"Decode Error: {e}", file=sys.stderr)
            return 1
        if decoded.format_version == "v1":
            logger.warning("Legacy v1 ciphertext: no checksum, integrity not verified.")
        elif decoded.checksum_verified:
            logger.info(f"CRC32 verified (0x{decoded.checksum_actual:08X}).")
        result = decoded.plaintext

    elif args.validate:
        validation = codec.validate_ciphertext(source_text.strip())
        if not validation.is_valid:
            print(f"Invalid: {validation.error}", file=sys.stderr)
            return 1
        result = "Valid"

    elif args.detect:
        info = codec.detect_format(source_text.strip())
        result = (
            f"version={info.version} has_crc={info.has_crc} "
            f"main_cipher_length={info.main_cipher_length} crc_length={info.crc_length}"
        )

    elif args.stats:
        try:
            ciphertext = codec.encode(source_text)
        except OI1Error as e:
            print(f"Encode Error: {e}", file=sys.stderr)
            return 1
        render_stats(console, codec, source_text, ciphertext)
        return 0

    else:
        render_quality(console, codec, source_text.strip())
        return 0

    # 3. WRITE OUTPUT
    try:
        write_result(args, result)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
