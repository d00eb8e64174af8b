"""
Configuration CLI commands: show, check
"""
import json


class ConfigCommand:
    """Configuration CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        from learnpath.config import settings

        if args.config_action == "show":
            print(json.dumps(settings.masked(), indent=2, default=str))
            return 0
        elif args.config_action == "check":
            try:
                settings.validate()
            except EnvironmentError as e:
                print(f"✗ {e}")
                return 1
            print(f"✓ Configuration valid for {settings.ENVIRONMENT}")
            return 0
        else:
            print("Error: Unknown config action (expected: show, check)")
            return 1
