"""Pure-Python jump-to-match engine: search, labels and the session state machine."""
