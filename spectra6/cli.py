"""
Command line front-end.

    python -m spectra6 convert 24_12_F_tree.jpg -o tree.bin --preview tree.png
    python -m spectra6 show 24_12_H_portrait.png
"""
import argparse
import logging
import os
import sys

from .buffer import pack
from .dither import DitherMode, quantize
from .errors import Spectra6Error
from .imageio import FIT_MODES, load_image, save_preview, save_raw

logger = logging.getLogger("spectra6")


def _parse_size(text: str) -> tuple:
    try:
        w, h = (int(v) for v in text.lower().replace("*", "x").split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"size must look like 800x480, got {text!r}")
    return w, h


def _parse_mode(text: str) -> int:
    try:
        return DitherMode.parse(text)
    except Spectra6Error as e:
        raise argparse.ArgumentTypeError(str(e))


def _resolve_mode(args) -> int:
    if args.mode is not None:
        return args.mode
    return DitherMode.from_filename(args.input)


def cmd_convert(args) -> int:
    mode = _resolve_mode(args)
    rgb = load_image(args.input, size=args.size, fit=args.fit)
    grid = quantize(rgb, mode)
    data = pack(grid)

    output = args.output or os.path.splitext(args.input)[0] + ".bin"
    save_raw(data, output)
    logger.info(
        "Converted %s (%s) -> %s: %d bytes", args.input, DitherMode.name(mode), output, len(data)
    )
    if args.preview:
        save_preview(grid, args.preview)
        logger.info("Preview written to %s", args.preview)
    return 0


def cmd_show(args) -> int:
    from .canvas import Canvas

    mode = _resolve_mode(args)
    with Canvas(fit=args.fit) as canvas:
        canvas.init()
        t = canvas.show_file(args.input, mode=mode)
        canvas.sleep()
    logger.info("Displayed %s in %.1fs", args.input, t)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectra6",
        description="Dither images for the 7.3\" Spectra 6 e-paper panel and drive it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Filename convention:
  DD_MM_X_name.ext selects the dither mode through X when --mode is omitted:
  F=Floyd-Steinberg  H=Halftone  O=Ordered  P=Pop-art  N=None
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("input", help="Input image file")
    common.add_argument("--mode", type=_parse_mode, default=None,
                        help="Dither mode tag or name (default: from filename)")
    common.add_argument("--fit", choices=FIT_MODES, default="cover",
                        help="How to fit the image to the panel (default: cover)")

    p_convert = sub.add_parser("convert", parents=[common], help="Write a packed frame file")
    p_convert.add_argument("-o", "--output", help="Output .bin path (default: next to input)")
    p_convert.add_argument("--preview", help="Also write a PNG preview of the dithered result")
    p_convert.add_argument("--size", type=_parse_size, default=(800, 480),
                           help="Output size WxH (default: 800x480)")
    p_convert.set_defaults(func=cmd_convert)

    p_show = sub.add_parser("show", parents=[common], help="Display an image on the panel")
    p_show.set_defaults(func=cmd_show)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        return args.func(args)
    except (Spectra6Error, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
