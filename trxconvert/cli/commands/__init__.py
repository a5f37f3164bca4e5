"""CLI commands for trxconvert.

Command modules are imported by :mod:`trxconvert.cli.main`; this package
only groups them so the conversion pipeline can import the shared models,
errors and types without loading click.
"""
