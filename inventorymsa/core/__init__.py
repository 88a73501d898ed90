from ._logging import get_logger, set_log_level  # noqa
from .errors import (  # noqa
    AppError,
    DepletedStockAllocationError,
    DuplicateEventRaisedError,
    DuplicateRestockOperationError,
    DuplicateStockAllocationError,
    InvalidArgumentsError,
    InvalidStockCompletionError,
    InvalidStockDeallocationError,
    UnrecognizedError,
    is_transient_error,
)
from .models import (  # noqa
    AbstractEventStore,
    AbstractOrderAllocationStore,
    AbstractQueueClient,
    AbstractSkuStore,
    AllocationWriteCommand,
    Command,
    Event,
    Message,
    WriteOutcome,
)
