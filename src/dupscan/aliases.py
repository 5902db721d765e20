from dupscan.core.models import ScanConfig

WORKERS_HELP_TEXT = (
    "Number of files hashed concurrently (1 = sequential).\n"
    f"  Default: 1. Maximum: {ScanConfig.MAX_WORKERS}.\n"
)

TIMEOUT_HELP_TEXT = (
    "Seconds a single file read may stall before the file is logged as a\n"
    "hash failure and skipped. Only applies with --workers > 1.\n"
)

VERIFY_HELP_TEXT = (
    "Confirm every duplicate set with a byte-by-byte comparison after hashing.\n"
    "Slower; removes any reliance on hash uniqueness.\n"
)

EPILOG_TEXT = """
Examples:
  Basic usage - audit two shares, write the report to the current directory
  %(prog)s -i /srv/share1 /srv/share2

  Only look at photos, hash 8 files at a time
  %(prog)s -i ~/Pictures -x .jpg .jpeg .png --workers 8

  Print the JSON report instead of writing a file (for scripts)
  %(prog)s -i ~/Downloads --stdout --quiet > report.json

  Paranoid mode: byte-compare every duplicate set, give up on reads stalled for 30s
  %(prog)s -i /mnt/nas --verify --workers 4 --timeout 30
"""

IMPORT_EPILOG_TEXT = """
Examples:
  Convert an old size-grouped CSV report (writes old_report_migrated.json)
  %(prog)s old_report.csv
"""
