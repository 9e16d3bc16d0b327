import sys

from laneracer.cli import main


sys.exit(main())
