"""
txn-file-sink: transactional channel sinks for Python.

Drains events one at a time from a transactional channel, appends each
payload with a millisecond timestamp to a file, and commits or rolls back
so no event is lost or written twice.
"""

__version__ = "0.1.0"

from txn_file_sink.channel import (
    Channel,
    MemoryChannel,
    MemoryTransaction,
    Transaction,
    TransactionState,
)
from txn_file_sink.config import FileSinkConfig, LoggerSinkConfig
from txn_file_sink.consumer import drain_one
from txn_file_sink.counters import SinkCounter
from txn_file_sink.errors import (
    ChannelError,
    ConfigurationError,
    DeliveryError,
    SinkError,
    is_environment_fault,
)
from txn_file_sink.events import Event, Status
from txn_file_sink.polling import PollPolicy, poll
from txn_file_sink.records import decode_body, epoch_millis, format_record, summarize_body
from txn_file_sink.runner import SinkRunner
from txn_file_sink.sinks import (
    EventSink,
    FileEventSink,
    LoggerEventSink,
    MemoryEventSink,
)
from txn_file_sink.validation import validate_context, validate_context_minimal

__all__ = [
    "__version__",
    # Core
    "Event",
    "Status",
    "drain_one",
    "poll",
    "PollPolicy",
    "SinkCounter",
    "SinkRunner",
    # Channels
    "Channel",
    "MemoryChannel",
    "MemoryTransaction",
    "Transaction",
    "TransactionState",
    # Sinks
    "EventSink",
    "FileEventSink",
    "FileSinkConfig",
    "LoggerEventSink",
    "LoggerSinkConfig",
    "MemoryEventSink",
    # Records
    "decode_body",
    "epoch_millis",
    "format_record",
    "summarize_body",
    # Errors
    "ChannelError",
    "ConfigurationError",
    "DeliveryError",
    "SinkError",
    "is_environment_fault",
    # Validation
    "validate_context",
    "validate_context_minimal",
]
