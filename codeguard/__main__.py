import sys

from codeguard.cli.runner import main

if __name__ == "__main__":
    sys.exit(main())
