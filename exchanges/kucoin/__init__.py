"""
KuCoin Exchange Connector

Authenticated REST client for KuCoin: deposits, HF spot orders, universal
transfers, sub-account API keys and withdrawals.

API Documentation:
    https://www.kucoin.com/docs

Endpoints Used:
    - GET    /api/v1/deposits                      - Deposit history
    - POST   /api/v1/hf/orders                     - Place spot order
    - POST   /api/v1/hf/orders/multi               - Place batch of spot orders
    - DELETE /api/v1/hf/orders/cancel/{orderId}    - Partially cancel spot order
    - POST   /api/v3/accounts/universal-transfer   - Transfer between accounts
    - POST   /api/v1/sub/api-key                   - Create sub-account API key
    - GET    /api/v2/sub/user                      - List sub-accounts
    - GET    /api/v1/sub-accounts/{subUserId}      - Sub-account balance
    - POST   /api/v3/withdrawals                   - Withdraw

Structure:
    exchanges/kucoin/
    ├── __init__.py          # This file
    ├── auth.py              # Credentials + HMAC signing
    └── api_client.py        # KucoinAPIClient (signing dispatcher + endpoints)
"""

from .auth import Credentials, build_headers, build_prehash, sign_passphrase, sign_prehash
from .api_client import KucoinAPIClient

__all__ = [
    "Credentials",
    "KucoinAPIClient",
    "build_headers",
    "build_prehash",
    "sign_passphrase",
    "sign_prehash",
]
