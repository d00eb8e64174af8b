"""
Operator CLI tests
"""
import json
from unittest.mock import Mock

import pytest

from learnpath.cli import create_parser, main
from learnpath.cli.config_commands import ConfigCommand
from learnpath.cli.db_commands import DbCommand
from learnpath.cli.user_commands import UserCommand


# =============================================================================
# CLI Parser Tests
# =============================================================================

class TestCLIParser:
    """Test CLI argument parsing."""

    def test_db_init_parsing(self):
        parser = create_parser()
        args = parser.parse_args(["db", "init"])

        assert args.command == "db"
        assert args.db_action == "init"

    def test_user_create_parsing(self):
        parser = create_parser()
        args = parser.parse_args([
            "user", "create", "--email", "root@example.com", "--name", "Root",
            "--password", "secret1", "--role", "ADMIN",
        ])

        assert args.command == "user"
        assert args.user_action == "create"
        assert args.email == "root@example.com"
        assert args.role == "ADMIN"

    def test_user_create_defaults_to_student(self):
        parser = create_parser()
        args = parser.parse_args(["user", "create", "--email", "a@example.com", "--name", "A", "--password", "secret1"])
        assert args.role == "STUDENT"

    def test_invalid_role_rejected(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["user", "set-role", "--email", "a@example.com", "--role", "ROOT"])

    def test_dry_run_flag(self):
        parser = create_parser()
        args = parser.parse_args(["--dry-run", "db", "init"])
        assert args.dry_run is True

    def test_log_level_flag(self):
        parser = create_parser()
        args = parser.parse_args(["--log-level", "DEBUG", "config", "show"])
        assert args.log_level == "DEBUG"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()


# =============================================================================
# Command Tests
# =============================================================================

class TestDbCommands:

    def test_init_dry_run(self, capsys):
        args = Mock()
        args.db_action = "init"

        assert DbCommand(dry_run=True).execute(args) == 0
        assert "[DRY RUN]" in capsys.readouterr().out

    def test_unknown_action(self):
        args = Mock()
        args.db_action = "explode"
        assert DbCommand().execute(args) == 1


class TestUserCommands:

    def test_create_dry_run_touches_nothing(self, capsys):
        args = Mock()
        args.user_action = "create"
        args.email = "root@example.com"
        args.role = "ADMIN"

        assert UserCommand(dry_run=True).execute(args) == 0
        assert "Would create ADMIN account root@example.com" in capsys.readouterr().out

    def test_unknown_action(self):
        args = Mock()
        args.user_action = "promote-everyone"
        assert UserCommand().execute(args) == 1


class TestConfigCommands:

    def test_show_masks_secret(self, capsys):
        args = Mock()
        args.config_action = "show"

        assert ConfigCommand().execute(args) == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["JWT_SECRET_KEY"] == "***"
        assert shown["ENVIRONMENT"] == "test"

    def test_check_passes_outside_production(self, capsys):
        args = Mock()
        args.config_action = "check"

        assert ConfigCommand().execute(args) == 0
        assert "Configuration valid" in capsys.readouterr().out
