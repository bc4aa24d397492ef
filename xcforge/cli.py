# SPDX-License-Identifier: MIT
"""Command-line interface for xcforge."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from xcforge.core.options import BuildOptions

# Set up logging
logger = logging.getLogger("xcforge")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def build_options(args: argparse.Namespace) -> BuildOptions:
    """Create BuildOptions from parsed arguments.

    Raises:
        XcforgeError: If the configuration or an SDK name is invalid.
    """
    from xcforge import get_configuration
    from xcforge.core.errors import XcforgeError
    from xcforge.core.options import BuildOptions, parse_sdks

    configuration = args.configuration or get_configuration()
    if configuration not in ("debug", "release"):
        raise XcforgeError(f"invalid build configuration: {configuration}")

    return BuildOptions(
        build_configuration=configuration,
        sdks=parse_sdks(getattr(args, "platforms", "") or ""),
        framework_type="static" if getattr(args, "static", False) else "dynamic",
        is_debug_symbols_embedded=getattr(args, "embed_debug_symbols", False),
    )


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate the Xcode project of a package.

    This command:
    1. Loads xcforge.json from the package directory
    2. Translates the package graph into a project model
    3. Writes <package>/.build/xcforge/<Name>.xcodeproj
    """
    setup_logging(args.verbose, args.debug)

    from xcforge.core.errors import XcforgeError
    from xcforge.core.manifest import load_package
    from xcforge.runner import Runner

    try:
        package = load_package(Path(args.package_dir))
        runner = Runner(package, build_options(args))
        runner.generate_project()
    except XcforgeError as e:
        logger.error("%s", e)
        return 1

    print(f"Generated {package.project_path}")
    return 0


def cmd_create(args: argparse.Namespace) -> int:
    """Generate the project and build one XCFramework per library product."""
    setup_logging(args.verbose, args.debug)

    from xcforge import get_output_dir
    from xcforge.core.errors import ToolNotFoundError, XcforgeError
    from xcforge.core.manifest import load_package
    from xcforge.runner import Runner

    output_dir = Path(args.output) if args.output else get_output_dir()

    try:
        if shutil.which("xcodebuild") is None:
            logger.info("Install Xcode and run 'xcode-select --install'")
            raise ToolNotFoundError("xcodebuild")
        options = build_options(args)
        if not options.sdks:
            logger.error("No platforms given (use --platforms iOS,iOSSimulator)")
            return 1
        package = load_package(Path(args.package_dir))
        runner = Runner(package, options)
        outputs = runner.run(output_dir.resolve(), overwrite=args.overwrite)
    except XcforgeError as e:
        logger.error("%s", e)
        return 1

    for path in outputs:
        print(f"Created {path}")
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "package_dir",
        nargs="?",
        default=".",
        help="Package directory containing xcforge.json (default: .)",
    )
    parser.add_argument(
        "-c",
        "--configuration",
        choices=["debug", "release"],
        help="Build configuration (default: release, or XCFORGE_CONFIGURATION)",
    )
    parser.add_argument(
        "--static",
        action="store_true",
        help="Build static frameworks instead of dynamic ones",
    )
    parser.add_argument(
        "--embed-debug-symbols",
        action="store_true",
        help="Embed dSYMs into the XCFrameworks",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the xcforge CLI."""
    parser = argparse.ArgumentParser(
        prog="xcforge",
        description="Build XCFrameworks from package graphs.",
        epilog="Run 'xcforge <command> --help' for command-specific help.",
    )
    from xcforge import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # xcforge generate
    gen_parser = subparsers.add_parser(
        "generate", help="Generate the Xcode project of a package"
    )
    add_common_args(gen_parser)
    gen_parser.set_defaults(func=cmd_generate)

    # xcforge create
    create_parser = subparsers.add_parser(
        "create", help="Build XCFrameworks for a package"
    )
    add_common_args(create_parser)
    create_parser.add_argument(
        "-o",
        "--output",
        metavar="DIR",
        help="Output directory (default: XCFrameworks, or XCFORGE_OUTPUT_DIR)",
    )
    create_parser.add_argument(
        "-p",
        "--platforms",
        metavar="SDKS",
        default="",
        help="Comma-separated SDKs to build for (e.g. iOS,iOSSimulator)",
    )
    create_parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace existing XCFrameworks",
    )
    create_parser.set_defaults(func=cmd_create)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
