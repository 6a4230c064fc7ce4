#!/usr/bin/env python3
# Run from this directory, e.g.,
#
#   ./prepare.py --stage 0 --stop-stage 12 --dl-dir /path/to/download
#
# Outputs are written to ./data
import sys
from wenetprep.recipes.wenetspeech import main


if __name__ == "__main__":
    sys.exit(main())
