# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKFLOW_APP_NAME": "App display name (default: taskflow).",
    "TASKFLOW_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Storage
    "TASKFLOW_BACKEND": "Persistence backend: json (single local file) or sqlite (default: json).",
    "TASKFLOW_DATA_DIR": "Local data directory (default: .local/taskflow).",
    "TASKFLOW_TASKS_JSON_PATH": "JSON backend file (default: <data_dir>/tasks.json).",
    "TASKFLOW_TASKS_DB_PATH": "SQLite backend path (default: <data_dir>/tasks.sqlite3).",
    "TASKFLOW_SESSION_PATH": "Anonymous sign-in session file (default: <data_dir>/session.json).",
    "TASKFLOW_AUTO_SIGN_IN": "Sign in anonymously on start (true/false, default: true).",
    # Reminders
    "TASKFLOW_DUE_SOON_MINUTES": "How close a due date must be to count as 'due soon' (default: 15).",
    "TASKFLOW_REMINDER_INTERVAL_SECONDS": "How often reminders are re-checked (default: 60).",
    "TASKFLOW_NOTIFIER": "Reminder delivery: console, matrix or none (default: console).",
    # Matrix (only for TASKFLOW_NOTIFIER=matrix)
    "TASKFLOW_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "TASKFLOW_MATRIX_USER_ID": "Matrix user ID used to send reminders.",
    "TASKFLOW_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "TASKFLOW_MATRIX_ROOM_ID": "Room that receives reminders.",
    "TASKFLOW_MATRIX_STORE_PATH": "Matrix session directory (default: <data_dir>/matrix).",
    # Console
    "TASKFLOW_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
}
