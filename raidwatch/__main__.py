"""Process entry point for ``raidwatch`` and ``python -m raidwatch``."""

from dotenv import load_dotenv

from raidwatch.cli.commands import app
from raidwatch.utils.helpers import get_env_file


def main() -> None:
    # variables already exported in the shell win over the .env file
    load_dotenv(get_env_file(), override=False)
    app(prog_name="raidwatch")


if __name__ == "__main__":
    main()
