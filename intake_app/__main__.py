import sys

from intake_app.main import main

sys.exit(main() or 0)
