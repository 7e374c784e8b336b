"""Core teardown logic for chrootctl."""
