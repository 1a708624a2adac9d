from __future__ import annotations

# Release API (gh api) calls
GH_TIMEOUT_SECONDS = 60.0
GH_UPLOAD_TIMEOUT_SECONDS = 10 * 60.0

# brew tap / bump-formula-pr clone the tap and push a branch
BREW_TIMEOUT_SECONDS = 10 * 60.0

# Idempotent GH read retry policy (writes are never retried)
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0
