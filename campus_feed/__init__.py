"""Campus Feed API - moderated, classified campus posts with threaded discussion."""

__version__ = "0.1.0"
