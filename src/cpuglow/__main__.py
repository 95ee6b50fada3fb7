import sys

from cpuglow.app import main

sys.exit(main())
