"""dicom-json CLI Package.

Public API:
- main: CLI entry point
"""

from dicom_json.cli.main import main

__all__ = ["main"]
