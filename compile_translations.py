#!/usr/bin/env python3
"""
Script to compile the .po catalogs under licensekeeper/locales into the .mo
files loaded by licensekeeper.i18n.
"""

import sys

from licensekeeper.i18n import DOMAIN, LOCALE_DIR
from licensekeeper.utils.po_catalog import compile_catalogs


def main():
    """Main function to compile all translations"""
    locales_dir = sys.argv[1] if len(sys.argv) > 1 else LOCALE_DIR
    for lang in compile_catalogs(locales_dir, DOMAIN):
        print(f"Compiled {lang}")


if __name__ == "__main__":
    main()
