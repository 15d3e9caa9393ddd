# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Keep local data under the gitignored .local/ directory.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name, used as the console prompt (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: WARNING). The log file always gets DEBUG.",
    # Storage
    "TODO_DATA_DIR": "Local data directory, also holds todo.log (default: .local/todo).",
    "TODO_STORAGE_BACKEND": "json | sqlite | memory (default: json).",
    "TODO_STORAGE_PATH": (
        "Storage file (default: <data_dir>/todo.json or <data_dir>/todo.sqlite3)."
    ),
}
