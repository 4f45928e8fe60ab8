"""Test suite for cuelock.

Test Structure:
- unit/: Unit tests mirroring the package layout
  - models/: report, step and axis metadata parsing
  - engine/: lookahead, reconciliation and row ordering
  - sync/: order documents, pull/push and debouncing
  - api/: HTTP client and database store against httpx.MockTransport
  - config/, cli/, utils/: ambient pieces
- conftest.py: Shared fixtures (sample reports, axis metadata)
"""
