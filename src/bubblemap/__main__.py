"""Run with: python -m bubblemap"""
import sys

from bubblemap.main import main

if __name__ == "__main__":
    sys.exit(main())
