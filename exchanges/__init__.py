"""
Exchange Connectors Package

Each exchange has its own subfolder with:
- auth.py: Credentials and request signing
- api_client.py: Authenticated REST client
"""
