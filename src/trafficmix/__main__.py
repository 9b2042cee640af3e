import sys

from trafficmix.cli import main

sys.exit(main())
