import sys

from avellaneda.main import main

sys.exit(main())
