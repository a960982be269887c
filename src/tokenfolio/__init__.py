# src/tokenfolio/__init__.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""TokenFolio: cached, retrying client for public cryptocurrency market data."""

__version__ = "0.1.0"
