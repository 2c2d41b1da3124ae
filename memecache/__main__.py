import sys

from memecache.cli import main

sys.exit(main())
