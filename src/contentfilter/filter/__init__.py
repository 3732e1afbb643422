"""OpenSMTPD filter: protocol codec, session buffers, scanner, dispatcher.

The dispatcher reads events from the MTA over stdin, keeps one message
buffer per open transaction, and at commit time scans the Subject
against the blacklist to answer proceed or reject.
"""
from contentfilter.filter.dispatcher import ProtocolDispatcher
from contentfilter.filter.headers import MessageHeaders, extract_headers
from contentfilter.filter.protocol import (
    REGISTRATIONS,
    FilterEvent,
    ReportEvent,
    dataline_response,
    decode_line,
    registration_response,
    result_response,
)
from contentfilter.filter.scanner import ContentScanner, ScanResult
from contentfilter.filter.sessions import SessionStore

__all__ = [
    "REGISTRATIONS",
    "ContentScanner",
    "FilterEvent",
    "MessageHeaders",
    "ProtocolDispatcher",
    "ReportEvent",
    "ScanResult",
    "SessionStore",
    "dataline_response",
    "decode_line",
    "extract_headers",
    "registration_response",
    "result_response",
]
