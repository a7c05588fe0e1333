#!/usr/bin/env python3
"""
GameTorch command-line interface.

Your API key is loaded from the GAMETORCH_API_KEY environment variable
(or an apikeys.txt file in the working directory).
"""
import sys
import json
import logging
import argparse

from . import __version__
from .api import generate_animation, get_animation, list_animations, regenerate_animation
from .config import ALLOWED_DURATIONS, DEFAULT_DURATION, DEFAULT_POLL_INTERVAL, DEFAULT_ZIP_TIMEOUT
from .exceptions import GameTorchError

# Set up basic logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130

ANIMATION_ACTIONS = {
    "generate": "Generate a new animation",
    "get": "Retrieve an existing animation",
    "list": "List your animations",
    "regenerate": "Regenerate an animation with the same parameters",
}


def commands_epilog():
    """Listing of every command, shown by 'gametorch help' and -h."""
    lines = ["commands:"]
    for action, description in ANIMATION_ACTIONS.items():
        lines.append(f"  animations {action:<12} {description}")
    lines.append(f"  {'help':<23} List all commands")
    return "\n".join(lines)


def handle_generate_command(args):
    """
    Handle 'animations generate'.

    Args:
        args: Parsed command-line arguments

    Returns:
        The JSON-serializable result
    """
    if args.output_file and not args.block:
        logger.warning("--output-file is only used together with --block")

    return generate_animation(
        prompt=args.prompt,
        duration=args.duration,
        block=args.block,
        output_file=args.output_file,
        input_image=args.input_image,
        model_id=args.model_id,
        model_name=args.model_name,
        poll_interval=args.poll_interval,
        timeout=args.timeout,
        zip_timeout=args.zip_timeout,
        local=args.local,
    )


def handle_get_command(args):
    return get_animation(args.id, local=args.local)


def handle_list_command(args):
    return list_animations(local=args.local)


def handle_regenerate_command(args):
    return regenerate_animation(args.id, local=args.local)


def build_parser():
    """Build the argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="gametorch",
        description="Generate 2D game sprite animations with the GameTorch API",
        epilog=commands_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-l", "--local", action="store_true", default=False,
                        help="Use local server (http://localhost:8000) instead of production")
    parser.add_argument("-s", "--silent", action="store_true", default=False,
                        help="Suppress informational logs")

    # Options accepted after any subcommand too
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-l", "--local", action="store_true", default=argparse.SUPPRESS,
                        help="Use local server (http://localhost:8000) instead of production")
    common.add_argument("-s", "--silent", action="store_true", default=argparse.SUPPRESS,
                        help="Suppress informational logs")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    help_parser = subparsers.add_parser("help", help="List all commands")
    help_parser.set_defaults(func=None)

    animations_parser = subparsers.add_parser("animations", help="Animation-related operations")
    actions = animations_parser.add_subparsers(dest="action", help="Animation operation", required=True)

    generate_parser = actions.add_parser("generate", parents=[common], help=ANIMATION_ACTIONS["generate"])
    generate_parser.add_argument("prompt", help="Description of the animation to generate")
    generate_parser.add_argument("-b", "--block", action="store_true",
                                 help="Block until rendering finishes and download the ZIP")
    generate_parser.add_argument("-o", "--output-file", type=str, default=None,
                                 help="Output file for the resulting ZIP when using --block")
    generate_parser.add_argument("-i", "--input-image", type=str, default=None, metavar="FILE",
                                 help="Optional input image to animate")
    model_group = generate_parser.add_mutually_exclusive_group()
    model_group.add_argument("--model-id", type=int, default=None, metavar="ID",
                             help="Animation model ID (defaults to 6)")
    model_group.add_argument("--model-name", type=str, default=None, metavar="NAME",
                             help="Animation model name, e.g. 'alpha/v2.1'")
    generate_parser.add_argument("-d", "--duration", type=int, default=DEFAULT_DURATION, metavar="SECONDS",
                                 help=f"Duration in seconds (allowed values: {' or '.join(map(str, ALLOWED_DURATIONS))})")
    generate_parser.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL, metavar="SECONDS",
                                 help="Seconds between status checks when using --block")
    generate_parser.add_argument("--timeout", type=float, default=None, metavar="SECONDS",
                                 help="Give up waiting after this many seconds (default: wait indefinitely)")
    generate_parser.add_argument("--zip-timeout", type=float, default=DEFAULT_ZIP_TIMEOUT, metavar="SECONDS",
                                 help="Seconds to wait for the ZIP once the render is complete")
    generate_parser.set_defaults(func=handle_generate_command)

    get_parser = actions.add_parser("get", parents=[common], help=ANIMATION_ACTIONS["get"])
    get_parser.add_argument("id", help="The identifier of the animation to fetch")
    get_parser.set_defaults(func=handle_get_command)

    list_parser = actions.add_parser("list", parents=[common], help=ANIMATION_ACTIONS["list"])
    list_parser.set_defaults(func=handle_list_command)

    regenerate_parser = actions.add_parser("regenerate", parents=[common],
                                           help=ANIMATION_ACTIONS["regenerate"])
    regenerate_parser.add_argument("id", help="The identifier of the animation to regenerate")
    regenerate_parser.set_defaults(func=handle_regenerate_command)

    return parser


def main(argv=None):
    """Main entry point for the GameTorch CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0

    if args.silent:
        logging.getLogger("gametorch").setLevel(logging.WARNING)

    try:
        result = func(args)
    except GameTorchError as e:
        logger.error(str(e))
        return e.exit_code
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return EXIT_INTERRUPTED

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
