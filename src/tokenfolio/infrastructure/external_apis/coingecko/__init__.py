# src/tokenfolio/infrastructure/external_apis/coingecko/__init__.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""CoinGecko external API package.

Purpose:
    Group CoinGecko-related infrastructure modules:

    * settings: Pydantic settings for the transport client.
    * client: Async HTTP transport over the public v3 API.
"""
