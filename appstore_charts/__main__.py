import sys

from appstore_charts.cli import main

sys.exit(main())
