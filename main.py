"""
Entry point for the WordPress to Sanity migration tool.
"""

import sys

from wp2sanity.migration_tool import WordPressMigrationTool
from wp2sanity.utils.pre_flight_checks import PreFlightCheckError, run_pre_flight_checks

CONFIG_FILE = "config/migration_config.json"


def main():
    """
    Main function to run the WordPress to Sanity migration tool.
    """
    tool = WordPressMigrationTool(config_file=CONFIG_FILE)
    tool.log_message("Starting WordPress to Sanity migration.")

    try:
        run_pre_flight_checks(tool.config)
    except PreFlightCheckError as e:
        tool.log_message(f"Pre-flight check failed: {e}", level="ERROR")
        sys.exit(1)

    if tool.dry_run:
        tool.log_message("Dry-run enabled: nothing will be uploaded or written.", level="DEBUG")

    stats = tool.run()
    tool.log_message("Migration process finished.")
    if stats.posts_failed:
        sys.exit(2)


if __name__ == "__main__":
    main()
