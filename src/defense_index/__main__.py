import sys

from defense_index.cli import main

sys.exit(main())
