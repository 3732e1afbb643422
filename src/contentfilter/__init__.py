"""contentfilter: OpenSMTPD filter rejecting mail by Subject blacklist."""

__version__ = "0.1.0"
