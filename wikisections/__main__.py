"""Allow ``python -m wikisections``."""

from .cli import main

main()
