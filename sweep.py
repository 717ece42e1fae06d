#!/usr/bin/env python
"""
Lead Sweep - CLI

Sweep every configured city for new leads.

Usage:
    python sweep.py
    python sweep.py --policy strict-content --limit 5
    python sweep.py --dry-run -q

Credentials are read from the environment (or a .env file):
    GOOGLE_API_KEY, GOOGLE_SHEETS_ID, GOOGLE_CREDENTIALS / GOOGLE_CREDENTIALS_FILE,
    AIRTABLE_API_KEY, AIRTABLE_BASE_ID, AIRTABLE_TABLE_NAME
"""

import sys
from leadsweep.cli import main

if __name__ == "__main__":
    sys.exit(main())
