import sys

from blockforge.cli.main import main

sys.exit(main())
