"""Command line interface for trxconvert."""
