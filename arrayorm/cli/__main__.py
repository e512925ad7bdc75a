"""
arrayorm CLI entry point.

Usage:
    python -m arrayorm.cli query records.json --where "age<30"
    python -m arrayorm.cli join authors.json books.json --local-key id --foreign-key authorId
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
