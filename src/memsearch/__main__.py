import sys

from memsearch.cli import main


sys.exit(main())
