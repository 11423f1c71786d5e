import sys

from control_system.main import main

sys.exit(main())
