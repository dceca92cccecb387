"""
AMOC bench: evaluate event detectors with Activity Monitor Operating
Characteristic curves.

    amocbench run                      Full study with default settings
    amocbench run --config study.yaml  Full study with overrides
"""

__version__ = "0.1.0"
