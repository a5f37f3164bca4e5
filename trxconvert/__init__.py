"""trxconvert: convert TRX test results into JUnit XML reports."""

__version__ = "0.1.0"
