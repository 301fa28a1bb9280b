#!/usr/bin/env python3
"""
Command-line interface for Battle Backgrounds.

Renders animated battle backgrounds from a ROM image to image files, lists
the background table, extracts decompressed assets and plots distortion
curves.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

import pandas as pd

from .constants import ASPECT_RATIOS, MAX_FRAME_SKIP, MAX_LAYER_INDEX
from .engine import Engine, check_alpha, configured_layers
from .common.visualizer import FrameVisualizer
from .rom.background import TABLE_FIELDS
from .rom.distorter import Distorter
from .rom.rom import ROM
from .utils.config_manager import ConfigManager, LOG_LEVELS
from .utils.error_handler import (BattleBackgroundError, ConfigurationError, ErrorCategory,
                                  error_boundary, error_handler)

logger = logging.getLogger("BattleBackgrounds.CLI")

def get_base_parser() -> argparse.ArgumentParser:
    """
    Create base argument parser for command-line interface.

    Returns:
        Base argument parser
    """
    parser = argparse.ArgumentParser(
        description="EarthBound battle background renderer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  render    Render frames of one or two layers to image files
  info      List the battle background table
  extract   Write a decompressed asset or palette swatch
  offsets   Plot per-scanline distortion offsets
""")

    parser.add_argument("--config", "-c", help="Configuration file (JSON or YAML)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Logging level")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--error-report", help="Write a JSON error report to this file")

    return parser

def setup_render_parser(subparsers) -> None:
    """
    Setup parser for 'render' command.

    Args:
        subparsers: Subparsers object from base parser
    """
    parser = subparsers.add_parser("render", help="Render frames to image files")

    parser.add_argument("rom_path", nargs="?", help="Path to ROM file (defaults to rom.path)")
    parser.add_argument("--layer1", type=int, help=f"First layer entry (0-{MAX_LAYER_INDEX}, 0 for none)")
    parser.add_argument("--layer2", type=int, help=f"Second layer entry (0-{MAX_LAYER_INDEX}, 0 for none)")
    parser.add_argument("--frames", "-n", type=int, default=1, help="Number of frames to render")
    parser.add_argument("--frame-skip", type=int, help=f"Ticks per frame (1-{MAX_FRAME_SKIP})")
    parser.add_argument("--aspect-ratio", type=int, choices=sorted(ASPECT_RATIOS.values()),
                        help="Letterbox height in pixels")
    parser.add_argument("--alpha", type=float, nargs="+", help="Blend weight per layer")
    parser.add_argument("--output-dir", "-d", help="Output directory")
    parser.add_argument("--scale", type=int, default=1, help="Integer upscaling of saved frames")

def setup_info_parser(subparsers) -> None:
    parser = subparsers.add_parser("info", help="List the battle background table")

    parser.add_argument("rom_path", nargs="?", help="Path to ROM file (defaults to rom.path)")
    parser.add_argument("--csv", help="Also write the table to a CSV file")
    parser.add_argument("--all", action="store_true", help="Include empty entries")

def setup_extract_parser(subparsers) -> None:
    parser = subparsers.add_parser("extract", help="Write a decompressed asset or palette swatch")

    parser.add_argument("rom_path", nargs="?", help="Path to ROM file (defaults to rom.path)")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--graphics", type=int, help="Graphics set index (writes tile data)")
    group.add_argument("--arrangement", type=int, help="Graphics set index (writes arrangement data)")
    group.add_argument("--palette", type=int, help="Palette index (writes a swatch image)")
    group.add_argument("--offset", type=lambda s: int(s, 16), help="File offset of a compressed stream (hex)")
    parser.add_argument("--out", "-o", required=True, help="Output file")

def setup_offsets_parser(subparsers) -> None:
    parser = subparsers.add_parser("offsets", help="Plot per-scanline distortion offsets")

    parser.add_argument("rom_path", nargs="?", help="Path to ROM file (defaults to rom.path)")
    parser.add_argument("--effect", "-e", type=int, required=True, help="Distortion effect index")
    parser.add_argument("--ticks", "-t", type=int, nargs="+", default=[0], help="Ticks to plot")
    parser.add_argument("--out", "-o", help="Save the plot to this file instead of showing it")

def load_rom(args, config: ConfigManager) -> ROM:
    """
    Load the ROM named on the command line or in the configuration.

    Raises:
        FileNotFoundError: If no ROM path is available or the file is missing
    """
    path = args.rom_path or config.get("rom.path")
    if not path:
        raise FileNotFoundError("No ROM path given on the command line or in the configuration")
    return ROM.from_file(path, config.get("rom.layout"))

@error_boundary(ErrorCategory.RENDER)
def handle_render_command(args, config: ConfigManager) -> int:
    """
    Handle 'render' command.

    Args:
        args: Command-line arguments
        config: Configuration with command-line overrides applied

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    rom = load_rom(args, config)
    engine = Engine.from_config(rom, config)

    frames = engine.pre_render(max(0, args.frames))

    visualizer = FrameVisualizer(scale=args.scale)
    directory = config.get("output.directory")
    paths = visualizer.save_frames(frames, directory, image_format=config.get("output.format"))

    print(f"Rendered {len(paths)} frames to {directory}")
    return 0

@error_boundary(ErrorCategory.LOAD)
def handle_info_command(args, config: ConfigManager) -> int:
    """
    Handle 'info' command.

    Args:
        args: Command-line arguments
        config: Configuration

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    rom = load_rom(args, config)

    rows = [bg.to_dict() for bg in rom.battle_backgrounds if args.all or not bg.is_empty]
    table = pd.DataFrame(rows, columns=TABLE_FIELDS).set_index("index")

    print(table.to_string())
    print(f"\n{len(table)} backgrounds, "
          f"{table['palette'].nunique()} palettes, {table['graphics'].nunique()} graphics sets")

    if args.csv:
        table.to_csv(args.csv)
        logger.info(f"Background table saved to {args.csv}")

    return 0

@error_boundary(ErrorCategory.DECODE)
def handle_extract_command(args, config: ConfigManager) -> int:
    """
    Handle 'extract' command.

    Args:
        args: Command-line arguments
        config: Configuration

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    rom = load_rom(args, config)

    if args.palette is not None:
        FrameVisualizer().save_palette(rom.get_background_palette(args.palette), args.out)
        print(f"Palette {args.palette} saved to {args.out}")
        return 0

    if args.graphics is not None:
        data = rom.get_background_graphics(args.graphics).rom_graphics.data
    elif args.arrangement is not None:
        data = rom.get_background_graphics(args.arrangement).arrangement
    else:
        data = rom.decompress(args.offset)

    directory = os.path.dirname(args.out)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(args.out, 'wb') as f:
        f.write(data)

    print(f"Wrote {len(data)} bytes to {args.out}")
    return 0

@error_boundary(ErrorCategory.DECODE)
def handle_offsets_command(args, config: ConfigManager) -> int:
    """
    Handle 'offsets' command.

    Args:
        args: Command-line arguments
        config: Configuration

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    rom = load_rom(args, config)
    effect = rom.get_distortion_effect(args.effect)
    logger.info(f"Effect {args.effect}: {effect}")

    FrameVisualizer().plot_offsets(Distorter(effect, None), args.ticks, args.out)
    return 0

def apply_overrides(args, config: ConfigManager) -> List[str]:
    """
    Copy command-line options into the configuration and validate the result.

    Returns:
        List of validation error messages (empty if valid)
    """
    overrides = {
        "layers.layer1": getattr(args, "layer1", None),
        "layers.layer2": getattr(args, "layer2", None),
        "frame_skip": getattr(args, "frame_skip", None),
        "aspect_ratio": getattr(args, "aspect_ratio", None),
        "alpha": getattr(args, "alpha", None),
        "output.directory": getattr(args, "output_dir", None),
        "logging.level": args.log_level,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)

    if args.debug:
        config.set("logging.level", "DEBUG")

    errors = config.validate_config(config.as_dict())
    if not errors:
        try:
            check_alpha(config.get("alpha"), len(configured_layers(config)))
        except ConfigurationError as e:
            errors.append(str(e))

    return errors

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        argv: Arguments to parse (None for sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = get_base_parser()
    subparsers = parser.add_subparsers(dest="command")

    setup_render_parser(subparsers)
    setup_info_parser(subparsers)
    setup_extract_parser(subparsers)
    setup_offsets_parser(subparsers)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    config = ConfigManager()
    if args.config and not config.load_config(args.config):
        return 2

    errors = apply_overrides(args, config)

    error_handler.console_level = getattr(logging, config.get("logging.level", "INFO"))
    error_handler.log_file = config.get("logging.file")
    error_handler.configure_logging()

    if errors:
        for error in errors:
            logger.error(f"Configuration validation error: {error}")
        return 2

    handlers = {
        "render": handle_render_command,
        "info": handle_info_command,
        "extract": handle_extract_command,
        "offsets": handle_offsets_command,
    }

    try:
        result = handlers[args.command](args, config)
    except BattleBackgroundError:
        result = None
    except OSError as e:
        error_handler.log_exception(e, f"File error: {e}", category=ErrorCategory.INPUT)
        result = None
    except IndexError as e:
        error_handler.log_exception(e, f"Invalid index: {e}", category=ErrorCategory.INPUT)
        result = None

    if args.error_report:
        error_handler.export_error_report(args.error_report)

    return 1 if result is None else result

if __name__ == "__main__":
    sys.exit(main())
