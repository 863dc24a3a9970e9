"""Network Registry — builds one NetworkClient per Network from settings.

Invariants:
    - Exactly one client per Network; services receive the mapping, never settings
    - Clients are created once per process and closed on shutdown

Design Decisions:
    - Module-level singleton mirroring db_manager: FastAPI lifespan and the CLI
      both call init_network_clients() before serving
"""

from swapbridge.config import Settings
from swapbridge.core.domain_types import Network
from swapbridge.core.network_protocols import NetworkClient
from swapbridge.infrastructure.binance_chain import BinanceChainClient
from swapbridge.infrastructure.loki_wallet import LokiWalletClient

network_clients: dict[Network, NetworkClient] = {}


def build_network_clients(settings: Settings) -> dict[Network, NetworkClient]:
    transport_options = {
        "timeout_seconds": settings.network_timeout_seconds,
        "max_retries": settings.network_max_retries,
        "base_delay_ms": settings.network_base_delay_ms,
        "max_delay_ms": settings.network_max_delay_ms,
    }
    return {
        Network.LOKI: LokiWalletClient(
            settings.loki_wallet_rpc_url,
            account_index=settings.loki_account_index,
            priority=settings.loki_transfer_priority,
            username=settings.loki_wallet_rpc_user,
            password=settings.loki_wallet_rpc_password,
            **transport_options,
        ),
        Network.BNB: BinanceChainClient(
            settings.bnb_api_url,
            settings.bnb_signer_url,
            settings.bnb_signer_token,
            denom=settings.bnb_denom,
            decimals=settings.bnb_decimals,
            lookback_days=settings.bnb_transaction_lookback_days,
            **transport_options,
        ),
    }


def init_network_clients(settings: Settings) -> dict[Network, NetworkClient]:
    network_clients.clear()
    network_clients.update(build_network_clients(settings))
    return network_clients


async def close_network_clients() -> None:
    for client in network_clients.values():
        await client.aclose()
    network_clients.clear()


def get_network_clients() -> dict[Network, NetworkClient]:
    """FastAPI dependency for the network client mapping."""
    return network_clients
