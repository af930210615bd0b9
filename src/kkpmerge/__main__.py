import sys

from kkpmerge.cli import main

sys.exit(main())
