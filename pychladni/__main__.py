import sys

from pychladni.main import main

sys.exit(main())
