#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Allow running as ``python -m lambdalogs``."""

import sys

from lambdalogs.cli import main

sys.exit(main())
