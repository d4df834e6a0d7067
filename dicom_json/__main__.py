"""Allow ``python -m dicom_json``."""

import sys

from dicom_json.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
