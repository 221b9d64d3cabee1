import sys
from cloudwatch_auto.app import main

sys.exit(main())
