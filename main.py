#!/usr/bin/env python3
"""! @brief Monster Train 2 draft assistant: card scoring and deck analysis"""

import sys
from mt2_draft.cli import run


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
