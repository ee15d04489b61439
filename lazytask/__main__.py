import sys

from lazytask.interface.tasks_app import main

sys.exit(main())
