"""Command-line interface for dryguard.

:mod:`dryguard.cli.main` defines the ``dryguard`` click group with the
``digest``, ``diff``, ``snapshot``, ``check`` and ``version`` commands.
Commands use only the names re-exported by :mod:`dryguard`.
"""
from __future__ import annotations
