import sys

from .simulation import main

sys.exit(main())
