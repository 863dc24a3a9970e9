"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real wallet, explorer or signer
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOKI_WALLET_RPC_URL", "http://loki-wallet.test/json_rpc")
os.environ.setdefault("BNB_API_URL", "http://bnb-api.test")
os.environ.setdefault("BNB_SIGNER_URL", "http://bnb-signer.test")
os.environ.setdefault("BNB_SIGNER_TOKEN", "test-signer-token")
os.environ.setdefault("SETTLEMENT_ENABLED", "false")
