"""CEX listings watcher."""
