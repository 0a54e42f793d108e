"""
qfind modules package.

This package contains modular components for the qfind multi-root search tool.
"""

# Import utility functions
from .utils import (
    format_http_error,
    extract_pagination_token,
    parse_size_to_bytes,
    format_time,
    normalize_path,
    join_path,
)

# Import result records and search configuration
from .models import (
    DEFAULT_PARALLEL,
    TYPE_DIRECTORY,
    TYPE_OBJECT,
    Entry,
    SearchCriteria,
    entry_from_api,
)

# Import walker errors and their classification
from .errors import (
    WalkerError,
    InvalidDirectoryError,
    NotFoundError,
    ErrorClass,
    classify_error,
)

# Import credentials handling
from .credentials import (
    CREDENTIALS_FILENAME,
    TOKEN_ENV_VAR,
    credential_store_filename,
    get_credentials,
    resolve_bearer_token,
)

# Import filtering functions
from .filters import (
    TYPE_CHOICES,
    compile_name_pattern,
    create_entry_filter,
)

# Import async Qumulo API client and tree walker
from .client import (
    AsyncQumuloClient,
)
from .walker import (
    EntryStream,
    TreeWalker,
)

# Import run state, output and orchestration
from .state import (
    RunState,
    StopReason,
)
from .barrier import (
    BarrierState,
    CompletionBarrier,
)
from .output import (
    Decision,
    OutputMultiplexer,
    ProgressTracker,
    format_entry,
)
from .orchestrator import (
    SearchOrchestrator,
    describe_error,
)

__all__ = [
    # Utils
    "format_http_error",
    "extract_pagination_token",
    "parse_size_to_bytes",
    "format_time",
    "normalize_path",
    "join_path",
    # Models
    "DEFAULT_PARALLEL",
    "TYPE_DIRECTORY",
    "TYPE_OBJECT",
    "Entry",
    "SearchCriteria",
    "entry_from_api",
    # Errors
    "WalkerError",
    "InvalidDirectoryError",
    "NotFoundError",
    "ErrorClass",
    "classify_error",
    # Credentials
    "CREDENTIALS_FILENAME",
    "TOKEN_ENV_VAR",
    "credential_store_filename",
    "get_credentials",
    "resolve_bearer_token",
    # Filters
    "TYPE_CHOICES",
    "compile_name_pattern",
    "create_entry_filter",
    # Client and walker
    "AsyncQumuloClient",
    "EntryStream",
    "TreeWalker",
    # Run state and output
    "RunState",
    "StopReason",
    "BarrierState",
    "CompletionBarrier",
    "Decision",
    "OutputMultiplexer",
    "ProgressTracker",
    "format_entry",
    # Orchestration
    "SearchOrchestrator",
    "describe_error",
]
