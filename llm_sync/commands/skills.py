"""
Skill store commands for the llm-sync CLI.
"""
import logging
from llm_sync.config import DEFAULT_SKILLS_REPO_DIR, SkillPaths
from llm_sync.core.skills import SkillStoreReconciler
from llm_sync.utils import prompt_yes_no

logger = logging.getLogger("llm_sync.skills")


def setup_parser(parser):
    """
    Set up the argument parser for the skills command group.

    Args:
        parser: The argument parser to set up
    """
    subparsers = parser.add_subparsers(dest="subcommand", help="Skills subcommands")

    sync_parser = subparsers.add_parser("sync", help="Sync skills into the canonical store and link tools to it")
    add_sync_arguments(sync_parser)


def add_sync_arguments(parser):
    parser.add_argument("--repo-dir", default=DEFAULT_SKILLS_REPO_DIR,
                        help=f"Repository skills directory (default: {DEFAULT_SKILLS_REPO_DIR})")
    parser.add_argument("--canonical-dir", default=None,
                        help="Canonical skills store (default: ~/.skills)")
    parser.add_argument("--home", default=None,
                        help="Home directory holding the tool configurations (default: ~)")
    parser.add_argument("--yes", "-y", action="store_true",
                        help="Copy local-only skills into the repository without asking")


def handle_command(args):
    """
    Handle skills commands.

    Args:
        args: Command arguments

    Returns:
        int: Exit code
    """
    if args.subcommand == "sync":
        return cmd_sync(args)
    else:
        logger.error("No subcommand specified")
        return 1


def cmd_sync(args):
    """
    Implement the skills sync command.

    Args:
        args: Command arguments

    Returns:
        int: Exit code
    """
    paths = SkillPaths.from_home(
        home=args.home,
        repo_dir=args.repo_dir,
        canonical_dir=args.canonical_dir,
    )
    logger.info("Skills Sync")
    reconciler = SkillStoreReconciler(
        paths,
        confirm=lambda question: prompt_yes_no(question, args.yes),
    )
    reconciler.run()
    return 0
