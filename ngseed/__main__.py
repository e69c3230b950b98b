"""Allow ``python -m ngseed``."""

from ngseed.cli import run

run()
