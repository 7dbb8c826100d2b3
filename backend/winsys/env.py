"""Environment loading helpers.

These helpers are not invoked at import time. The server entrypoint calls them
explicitly before settings are read.
"""

from __future__ import annotations

from dotenv import find_dotenv, load_dotenv


def load_dotenv_if_present() -> bool:
    """Load environment variables from a .env file if one can be found.

    Variables already present in the environment win over the file.
    """

    dotenv_path = find_dotenv(filename=".env", usecwd=True)
    if not dotenv_path:
        return False
    return load_dotenv(dotenv_path=dotenv_path, override=False)
