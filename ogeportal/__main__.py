"""
Package entry point.

Allows running the application via:

    python -m ogeportal

This simply forwards execution to ogeportal.cli.main().
"""

from ogeportal.cli import main

if __name__ == "__main__":
    main()
