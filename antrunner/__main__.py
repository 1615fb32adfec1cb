import sys

from antrunner.main import main

sys.exit(main())
