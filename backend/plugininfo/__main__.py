import sys

from .cli_interface import main

sys.exit(main())
