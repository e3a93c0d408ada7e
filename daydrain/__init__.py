"""DayDrain ledger — daily Focus/Overflow/Inbox task store with carry-over.

Public API re-exports for convenient imports:
    from daydrain import Ledger, DayStore, sanitize, summarize, ...
"""

# Workspace & paths
from daydrain.workspace import (
    workspace_root,
    load_settings,
    save_settings,
    get_user_timezone,
    today_str,
    day_key,
    shift_day,
    week_bounds,
    days_dir,
    day_path,
    today_alias_path,
    settings_path,
    hooks_config_path,
)

# File I/O
from daydrain.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
    write_json_atomic_many,
    write_yaml_atomic,
)

# Models
from daydrain.models import (
    FOCUS_LABELS,
    PRIORITIES,
    FocusSlot,
    OverflowItem,
    InboxItem,
    UIState,
    DaySnapshot,
    DayBreakdown,
    WeekSummary,
    Settings,
)

# Engines
from daydrain.sanitize import sanitize, sanitize_dict
from daydrain.carryover import apply as carry_over
from daydrain.store import DayStore, StorageError, StoreResult
from daydrain.mover import (
    MoveResult,
    promote_to_focus,
    transfer_to_focus,
    demote_focus_to_overflow,
    demote_focus_to_inbox,
    move_overflow_to_inbox,
    move_inbox_to_overflow,
)
from daydrain.summary import summarize
from daydrain.hooks import run_hooks, load_hooks_config

# Facade
from daydrain.ledger import Ledger, encode_payload, decode_payload
