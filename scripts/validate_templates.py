#!/usr/bin/env python3
"""
Template Validation Script

Checks the template catalog and its image assets before deploying.
"""

import sys
import os

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.services.meme.templates.validation import validate_catalog  # noqa: E402
from loguru import logger as log  # noqa: E402
from src.utils.logging_config import setup_logging  # noqa: E402

# Setup logging
setup_logging()


def main():
    """Main validation function."""
    log.info("🔍 Starting template validation...")

    problems = validate_catalog()
    if problems:
        for problem in problems:
            log.error(f"❌ {problem}")
        log.error(f"❌ Template validation failed with {len(problems)} problem(s)")
        return 1

    log.info("✅ Template validation passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
