"""Integration tests.

Integration tests run real commands against real directory trees. They
are kept in a separate directory so they can be excluded from the fast
unit-test run with ``pytest tests/unit/``.
"""
