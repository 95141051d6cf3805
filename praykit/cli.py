#!/usr/bin/env python3
"""
praykit CLI - Command-line interface for Creatures agent files and sprites.

Usage:
    praykit info ball.agents
    praykit extract ball.agents --output ./extracted/
    praykit validate ball.agents
    praykit add ball.agents ball.c16 ball.cos --tag 0
    praykit sprite-info ball.c16
    praykit sprite-export ball.c16 --output ./frames/
    praykit sprite-build frame0.png frame1.png --output ball.c16
    praykit catalogue --entry "2 21 1000" "Ball" "A bouncy ball" --output ball.catalogue
"""

import argparse
import sys
import json
from pathlib import Path


def cmd_info(args):
    """Show information about an agent file."""
    from praykit.package import get_agent_info

    try:
        info = get_agent_info(args.agent_file)

        if args.json:
            print(json.dumps(info, indent=2))
            return 0

        print(f"Tags: {len(info['tags'])}")
        for i, tag in enumerate(info["tags"]):
            print(f"  [{i}] {tag['name']} ({tag['type']})")
            for dependency in tag.get("dependencies", []):
                print(f"      - {dependency}")

        print(f"\nFiles: {len(info['files'])}")
        for f in info["files"]:
            size_kb = f["size"] / 1024
            print(f"  {f['filename']}: {size_kb:.1f} KB (category {f['category']})")

        print(f"\nBlocks: {len(info['blocks'])}")
        for block in info["blocks"]:
            flag = "zlib" if block["compressed"] else "raw"
            print(f"  {block['id']} \"{block['name']}\" {block['uncompressed_size']} bytes ({flag})")

        total_kb = info["total_uncompressed_size"] / 1024
        archive_kb = info["archive_size"] / 1024
        print(f"\nTotal: {total_kb:.1f} KB (archive: {archive_kb:.1f} KB)")

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_extract(args):
    """Extract files from an agent file."""
    from praykit.package import extract_agent_files

    try:
        output_dir = Path(args.output or f"{Path(args.agent_file).stem}_extracted")

        written, skipped = extract_agent_files(
            args.agent_file,
            output_dir,
            filenames=args.file,
            overwrite=args.overwrite,
        )

        for filename in skipped:
            print(f"Skipped existing file: {filename}")
        print(f"Extracted {len(written)} files to: {output_dir}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_validate(args):
    """Validate an agent file."""
    from praykit.package import validate_agent_file

    try:
        valid, errors = validate_agent_file(args.agent_file)

        if valid:
            print("✓ Agent file is valid")
            return 0
        else:
            print("✗ Validation failed:")
            for error in errors:
                print(f"  - {error}")
            return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_add(args):
    """Add files to an agent file."""
    from praykit.package import add_files_to_agent

    try:
        added = add_files_to_agent(
            args.agent_file,
            args.files,
            tag_index=args.tag,
            output_path=args.output,
        )
        for filename in added:
            print(f"Added: {filename}")
        print(f"Success: {args.output or args.agent_file}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_sprite_info(args):
    """Show information about a sprite file."""
    from praykit.sprites import get_sprite_stats

    try:
        path = Path(args.sprite_file)
        stats = get_sprite_stats(path.name, path.read_bytes())

        print(f"Format: {stats['format'].upper()} ({stats['pixel_format']})")
        if "cols" in stats:
            print(f"Tiles: {stats['cols']} x {stats['rows']}")
        print(f"Frames: {stats['frame_count']}")
        for i, (width, height) in enumerate(stats["frame_sizes"]):
            print(f"  [{i}] {width} x {height}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_sprite_export(args):
    """Export sprite frames as PNG images."""
    from praykit.pipeline_sprites import export_sprite

    try:
        name = Path(args.sprite_file).name
        output_dir = args.output or f"{Path(name).stem}_frames"

        export_sprite(
            args.sprite_file,
            output_dir,
            agent_file=args.agent,
            background=args.background,
        )
        return 0
    except ImportError:
        print("Error: opencv-python required for sprite export", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_sprite_build(args):
    """Build a sprite file from PNG frames."""
    from praykit.pipeline_sprites import build_sprite
    from praykit.pixel import PIXEL_FORMAT_555, PIXEL_FORMAT_565

    try:
        pixel_format = PIXEL_FORMAT_555 if args.pixel_format == "555" else PIXEL_FORMAT_565

        result = build_sprite(
            args.frames,
            args.output,
            pixel_format=pixel_format,
            background=args.background,
        )
        print(f"Success: {result}")
        return 0
    except ImportError:
        print("Error: opencv-python required for sprite build", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_catalogue(args):
    """Write a catalogue file from help entries."""
    from praykit.catalogue import CatalogueEntry, build_catalogue

    try:
        entries = [CatalogueEntry(*entry) for entry in args.entry]
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(build_catalogue(entries))

        print(f"Success: {output_path} ({len(entries)} entries)")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def build_parser():
    parser = argparse.ArgumentParser(
        prog="praykit",
        description="praykit CLI - Inspect and build Creatures agent files and sprites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  praykit info ball.agents
  praykit extract ball.agents --output ./extracted/
  praykit sprite-export ball.c16 --output ./frames/
  praykit sprite-build frame0.png frame1.png --output ball.c16
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # info
    info_parser = subparsers.add_parser(
        "info",
        help="Show information about an agent file",
    )
    info_parser.add_argument("agent_file", help="Path to .agent/.agents file")
    info_parser.add_argument("--json", action="store_true", help="Print the info as JSON")
    info_parser.set_defaults(func=cmd_info)

    # extract
    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract files from an agent file",
    )
    extract_parser.add_argument("agent_file", help="Path to .agent/.agents file")
    extract_parser.add_argument("--output", "-o", help="Output directory")
    extract_parser.add_argument("--file", "-f", action="append", help="Only extract this file (repeatable)")
    extract_parser.add_argument("--overwrite", action="store_true", help="Overwrite existing files")
    extract_parser.set_defaults(func=cmd_extract)

    # validate
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check an agent file for missing dependencies and broken sprites",
    )
    validate_parser.add_argument("agent_file", help="Path to .agent/.agents file")
    validate_parser.set_defaults(func=cmd_validate)

    # add
    add_parser = subparsers.add_parser(
        "add",
        help="Add dependency files to an agent file",
    )
    add_parser.add_argument("agent_file", help="Path to .agent/.agents file (created if missing)")
    add_parser.add_argument("files", nargs="+", help="Files to add")
    add_parser.add_argument("--tag", type=int, help="Index of the tag that depends on the files")
    add_parser.add_argument("--output", "-o", help="Write to this file instead of modifying in place")
    add_parser.set_defaults(func=cmd_add)

    # sprite-info
    sprite_info_parser = subparsers.add_parser(
        "sprite-info",
        help="Show frame sizes of a BLK/S16/C16 file",
    )
    sprite_info_parser.add_argument("sprite_file", help="Path to sprite file")
    sprite_info_parser.set_defaults(func=cmd_sprite_info)

    # sprite-export
    export_parser = subparsers.add_parser(
        "sprite-export",
        help="Export sprite frames as PNG images",
    )
    export_parser.add_argument("sprite_file", help="Sprite file (or its name inside --agent)")
    export_parser.add_argument("--agent", help="Read the sprite from this agent file")
    export_parser.add_argument("--output", "-o", help="Output directory")
    export_parser.add_argument("--background", action="store_true", help="Assemble BLK tiles into one image")
    export_parser.set_defaults(func=cmd_sprite_export)

    # sprite-build
    build_parser_ = subparsers.add_parser(
        "sprite-build",
        help="Build a BLK/S16/C16 file from images",
    )
    build_parser_.add_argument("frames", nargs="+", help="Input images, one per frame")
    build_parser_.add_argument("--output", "-o", required=True, help="Output sprite file (.blk/.s16/.c16)")
    build_parser_.add_argument("--pixel-format", choices=["555", "565"], default="565", help="Pixel format (default: 565)")
    build_parser_.add_argument("--background", action="store_true", help="Cut a single image into BLK tiles")
    build_parser_.set_defaults(func=cmd_sprite_build)

    # catalogue
    catalogue_parser = subparsers.add_parser(
        "catalogue",
        help="Write a catalogue file of agent help entries",
    )
    catalogue_parser.add_argument(
        "--entry", nargs=3, action="append", required=True,
        metavar=("CLASSIFIER", "NAME", "DESCRIPTION"),
        help="Help entry (repeatable)",
    )
    catalogue_parser.add_argument("--output", "-o", required=True, help="Output .catalogue file")
    catalogue_parser.set_defaults(func=cmd_catalogue)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
