"""
Channel sinks for txn-file-sink.

Sinks drain a transactional channel and persist or forward each event.
"""

from txn_file_sink.sinks.base import EventSink
from txn_file_sink.sinks.file import FileEventSink
from txn_file_sink.sinks.logging_sink import LoggerEventSink
from txn_file_sink.sinks.memory import MemoryEventSink

__all__ = [
    "EventSink",
    "FileEventSink",
    "LoggerEventSink",
    "MemoryEventSink",
]
