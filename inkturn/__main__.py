import sys

from inkturn.cli import main

sys.exit(main())
