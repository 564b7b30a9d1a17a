"""
Hack VM Toolchain Command-Line Interface
========================================

This package provides command-line tools for the toolchain:

- **hackvm**: VM translator (.vm → .asm)
- **hackasm**: Hack assembler (.asm → .hack)

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["hackvm", "hackasm"]
