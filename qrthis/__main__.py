import sys

from qrthis.cli import main

sys.exit(main())
