"""SQLite storage for observations, sessions, prompts, feedback, vectors and sync state."""