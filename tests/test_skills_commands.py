"""
Test the CLI skills commands.
"""
import unittest
from unittest.mock import patch, MagicMock
from pathlib import Path
from llm_sync.commands import skills


class TestSkillsCommands(unittest.TestCase):
    """
    Test the skills commands.
    """

    @patch("llm_sync.commands.skills.SkillStoreReconciler")
    def test_sync(self, mock_reconciler_class):
        """Test the sync command."""
        args = MagicMock()
        args.home = "/home/tester"
        args.repo_dir = "/work/dotfiles/skills"
        args.canonical_dir = None
        args.yes = False

        result = skills.cmd_sync(args)

        self.assertEqual(result, 0)
        paths = mock_reconciler_class.call_args[0][0]
        self.assertEqual(paths.repo_dir, Path("/work/dotfiles/skills"))
        self.assertEqual(paths.opencode_config_file, Path("/home/tester/.config/opencode/config.json"))
        self.assertEqual(
            [target for label, target in paths.consumers],
            [Path("/home/tester/.config/opencode/skills"), Path("/home/tester/.claude/skills")],
        )
        mock_reconciler_class.return_value.run.assert_called_once()

    @patch("llm_sync.commands.skills.SkillStoreReconciler")
    def test_sync_with_canonical_override(self, mock_reconciler_class):
        args = MagicMock()
        args.home = "/home/tester"
        args.repo_dir = "/work/skills"
        args.canonical_dir = "/srv/skills"
        args.yes = True

        skills.cmd_sync(args)

        paths = mock_reconciler_class.call_args[0][0]
        self.assertEqual(paths.canonical_dir, Path("/srv/skills"))

    def test_handle_command_without_subcommand(self):
        args = MagicMock()
        args.subcommand = None
        self.assertEqual(skills.handle_command(args), 1)


if __name__ == "__main__":
    unittest.main()
