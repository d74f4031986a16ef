# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Main entry point for running hubkit as a module.

Allows running:
    python -m hubkit search "living room lamp" --adapters adapters.json
"""

from .main import main

if __name__ == "__main__":
    main()
