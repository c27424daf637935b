import sys

from openkep.cli import main

sys.exit(main())
