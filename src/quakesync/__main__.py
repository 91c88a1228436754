import sys

from quakesync.cli import main

sys.exit(main())
