"""
Model management commands for the llm-sync CLI.
"""
import logging
from llm_sync.config import DEFAULT_CATALOG_FILE, DEFAULT_FOOTPRINT_DIVISOR, RetryPolicy, SyncSettings
from llm_sync.core.capacity import CapacityProbe
from llm_sync.core.catalog import unknown_policy_from_flag
from llm_sync.core.managers import BACKENDS, BACKEND_API, create_manager
from llm_sync.core.syncer import ModelSyncer
from llm_sync.core.tool_probe import probe_models, ProbeStatus
from llm_sync.utils import OllamaClient, prompt_yes_no, wait_for_enter

logger = logging.getLogger("llm_sync.model")


def setup_parser(parser):
    """
    Set up the argument parser for the model command group.

    Args:
        parser: The argument parser to set up
    """
    subparsers = parser.add_subparsers(dest="subcommand", help="Model subcommands")

    # sync command
    sync_parser = subparsers.add_parser("sync", help="Download catalog models that fit this host")
    add_sync_arguments(sync_parser)

    # tools command
    tools_parser = subparsers.add_parser("tools", help="Probe installed models for tool-calling support")
    add_tools_arguments(tools_parser)
    tools_parser.set_defaults(print_help=tools_parser.print_help)


def add_sync_arguments(parser):
    parser.add_argument("--catalog", "-c", default=DEFAULT_CATALOG_FILE,
                        help=f"Model catalog CSV (default: {DEFAULT_CATALOG_FILE})")
    parser.add_argument("--cleanup", action="store_true",
                        help="Remove installed models that are not in the catalog "
                             "(an untagged catalog name also keeps its :latest tag)")
    parser.add_argument("--yes", "-y", action="store_true",
                        help="Answer yes to confirmation prompts")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be downloaded or removed without doing it")
    parser.add_argument("--backend", choices=BACKENDS, default=BACKEND_API,
                        help=f"How to talk to Ollama (default: {BACKEND_API})")
    parser.add_argument("--strict-sizes", action="store_true",
                        help="Treat unrecognised size requirements as unmet")
    parser.add_argument("--max-attempts", type=int, default=None,
                        help="Give up on a model after this many failed pulls (default: retry forever)")
    parser.add_argument("--retry-delay", type=float, default=5.0,
                        help="Seconds to wait between pull attempts (default: 5)")
    parser.add_argument("--footprint-divisor", type=int, default=DEFAULT_FOOTPRINT_DIVISOR,
                        help="Estimate download size as min_disk divided by this "
                             f"(default: {DEFAULT_FOOTPRINT_DIVISOR})")


def add_tools_arguments(parser):
    parser.add_argument("--all", dest="all_models", action="store_true",
                        help="Test all installed models")
    parser.add_argument("pattern", nargs="*",
                        help="Test only models whose name contains this substring")


def handle_command(args):
    """
    Handle model commands.

    Args:
        args: Command arguments

    Returns:
        int: Exit code
    """
    if args.subcommand == "sync":
        return cmd_sync(args)
    elif args.subcommand == "tools":
        return cmd_tools(args)
    else:
        logger.error("No subcommand specified")
        return 1


def ask_for_space(model_name, available_gb, needed_gb):
    return wait_for_enter("Free up space and press Enter to retry...")


def build_settings(args):
    retry = RetryPolicy(max_attempts=args.max_attempts, delay=args.retry_delay)
    return SyncSettings(
        catalog_file=args.catalog,
        cleanup=args.cleanup,
        dry_run=args.dry_run,
        assume_yes=args.yes,
        unknown_size_policy=unknown_policy_from_flag(args.strict_sizes),
        footprint_divisor=args.footprint_divisor,
        retry=retry,
    )


def cmd_sync(args):
    """
    Implement the model sync command.

    Args:
        args: Command arguments

    Returns:
        int: Exit code
    """
    if args.max_attempts is not None and args.max_attempts < 1:
        logger.error("--max-attempts must be at least 1")
        return 1
    settings = build_settings(args)

    logger.info("Ollama Model Sync")
    syncer = ModelSyncer(
        settings,
        manager=create_manager(args.backend, args.api_base),
        capacity_probe=CapacityProbe(settings.disk_path),
        confirm=lambda question: prompt_yes_no(question, settings.assume_yes),
        wait_for_space=ask_for_space,
    )
    report = syncer.run()

    if not report.success:
        logger.warning("Some models could not be downloaded")
        return 1
    logger.info("All operations complete!")
    return 0


def resolve_pattern(args):
    """
    Work out which models to probe from the positional arguments.

    Several arguments, or one that looks like a file path, mean the shell
    expanded an unquoted ``*``; treat that as --all.

    Returns:
        str or None: Substring filter, or None for all models
    """
    patterns = args.pattern or []
    if args.all_models or len(patterns) > 1:
        return None
    pattern = patterns[0] if patterns else None
    if pattern is None:
        return None
    if "/" in pattern or pattern.endswith(".csv") or pattern.endswith(".sh"):
        return None
    return pattern


def cmd_tools(args):
    """
    Implement the model tools command.

    Args:
        args: Command arguments

    Returns:
        int: Exit code
    """
    if not args.all_models and not args.pattern:
        args.print_help()
        return 0

    results = probe_models(OllamaClient(args.api_base), resolve_pattern(args))
    errors = [r.model for r in results if r.status is ProbeStatus.ERROR]
    if errors:
        logger.warning(f"Could not probe: {', '.join(errors)}")
    return 0
