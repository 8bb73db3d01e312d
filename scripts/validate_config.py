#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import Any, Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from stratlab.config.loader import ConfigLoader
from stratlab.config.validation import ConfigValidator, ValidationError


def validate_merged_config(run_overrides: Optional[dict[str, Any]] = None) -> list[ValidationError]:
    """Validate defaults + strategies.yaml + optional run overrides."""
    loader = ConfigLoader.create()
    config = loader.merge_config(run_overrides)
    return ConfigValidator.validate_config(config)


def report(label: str, errors: list[ValidationError]) -> bool:
    if errors:
        print(f"❌ {label}: {len(errors)} validation errors")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        return False

    print(f"✅ {label} is valid")
    return True


def main():
    """Main validation function."""
    print("🔍 Validating stratlab configuration...")

    all_valid = report("Bundled configuration", validate_merged_config())

    print("\n📋 Testing run-level overrides...")
    test_overrides = {
        "rsi": {"threshold": 25, "cooldown_days": 3},
        "optimizer": {"top_k": 5, "prune": False},
    }
    all_valid = report("Run overrides", validate_merged_config(test_overrides)) and all_valid

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
