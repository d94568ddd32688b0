"""Process exit codes shared by every subcommand."""

OK = 0
USER_ERR = 2  # bad arguments or config, or the target already exists
IO_ERR = 3  # entry/archive not found, commit failed
INTERNAL = 4
