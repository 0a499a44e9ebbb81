"""Load, validate and transform OSCAL documents in JSON form and their rule extensions."""

__version__ = "0.1.0"