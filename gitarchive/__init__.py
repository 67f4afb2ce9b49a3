"""gitarchive - local bare mirrors of registered git repositories."""
