# Allows `python -m mcpwire`
import sys

from mcpwire.cli import main

if __name__ == "__main__":
    sys.exit(main())
