"""Main entry point when executing learnassist as a package.

This allows running the package using python -m learnassist.
"""

from learnassist.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
