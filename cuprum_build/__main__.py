import sys

from cuprum_build.cli import main

sys.exit(main())
