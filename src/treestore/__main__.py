import sys

from treestore.cli import main

sys.exit(main())
