#!/usr/bin/env python3
"""
Main CLI entry point for the LLM Sync application.
"""
import argparse
import sys
import os
import logging
from llm_sync import __version__
from llm_sync.commands import model, skills
from llm_sync.config import (
    DEFAULT_API_BASE, DEFAULT_HOST_CONFIG_FILE, load_api_base_from_config
)
from llm_sync.errors import PreconditionError


class CliArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on bad usage."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def setup_logging(verbose=False):
    """Configure logging for the application"""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )
    return logging.getLogger("llm_sync")


def add_global_arguments(parser):
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--host-config", type=str, default=None,
        help="Path to Ollama host configuration file (default: ollama_host.conf)"
    )
    parser.add_argument(
        "--api", "-a", type=str, default=None,
        help=f"Ollama API base URL (default: from host config file or {DEFAULT_API_BASE})"
    )


def build_parser():
    parser = CliArgumentParser(
        prog="llm-sync",
        description="Tools for keeping local LLM models and assistant skills in sync.",
    )
    add_global_arguments(parser)

    # Create subparsers for our command groups
    subparsers = parser.add_subparsers(dest="command_group", help="Command group")

    # Add model commands
    model_parser = subparsers.add_parser("model", help="Model management commands")
    model.setup_parser(model_parser)

    # Add skills commands
    skills_parser = subparsers.add_parser("skills", help="Skill store commands")
    skills.setup_parser(skills_parser)

    return parser


def resolve_api_base(args):
    """
    Determine the Ollama API base URL.

    Priority: --api, then --host-config, then ollama_host.conf in the current
    directory, then the default.
    """
    if args.api:
        return args.api
    if args.host_config:
        config_api = load_api_base_from_config(args.host_config)
        if config_api:
            return config_api
    elif os.path.isfile(DEFAULT_HOST_CONFIG_FILE):
        config_api = load_api_base_from_config(DEFAULT_HOST_CONFIG_FILE)
        if config_api:
            return config_api
    return DEFAULT_API_BASE


def run(args, handler):
    """
    Run a command handler with logging and error reporting in place.

    Returns:
        int: Exit code
    """
    logger = setup_logging(args.verbose)

    # Check for mutually exclusive --api and --host-config
    if args.api and args.host_config:
        logger.error("--api and --host-config are mutually exclusive. Please specify only one.")
        return 1
    args.api_base = resolve_api_base(args)

    try:
        return handler(args)
    except PreconditionError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 1
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=args.verbose)
        return 1


def main(argv=None):
    """Main entry point for the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command_group == "model":
        return run(args, model.handle_command)
    elif args.command_group == "skills":
        return run(args, skills.handle_command)

    parser.print_help()
    return 0


def _standalone(prog, description, add_arguments, handler, argv):
    parser = CliArgumentParser(prog=prog, description=description)
    add_global_arguments(parser)
    add_arguments(parser)
    parser.set_defaults(print_help=parser.print_help)
    args = parser.parse_args(argv)
    return run(args, handler)


def sync_models_main(argv=None):
    """Entry point for sync-ollama-models."""
    return _standalone(
        "sync-ollama-models",
        "Download catalog models that fit this host.",
        model.add_sync_arguments, model.cmd_sync, argv,
    )


def probe_tools_main(argv=None):
    """Entry point for test-ollama-tools."""
    return _standalone(
        "test-ollama-tools",
        "Probe installed models for tool-calling support.",
        model.add_tools_arguments, model.cmd_tools, argv,
    )


def sync_skills_main(argv=None):
    """Entry point for sync-skills."""
    return _standalone(
        "sync-skills",
        "Sync skills into the canonical store and link tools to it.",
        skills.add_sync_arguments, skills.cmd_sync, argv,
    )


if __name__ == "__main__":
    sys.exit(main())
