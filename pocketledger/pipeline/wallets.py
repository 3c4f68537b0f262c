from __future__ import annotations

from typing import Iterable

from .models import Wallet, WalletType

WALLET_TYPE_ORDER = (WalletType.LIQUIDITY, WalletType.INVEST)


def group_wallets_by_type(wallets: Iterable[Wallet]) -> dict[WalletType, list[Wallet]]:
    grouped: dict[WalletType, list[Wallet]] = {wallet_type: [] for wallet_type in WALLET_TYPE_ORDER}
    for wallet in wallets:
        grouped[wallet.type].append(wallet)
    return grouped


def order_wallets_for_ui(wallets: Iterable[Wallet]) -> list[Wallet]:
    """Liquidity wallets first, then investments; each group by (sort_order, id)."""
    grouped = group_wallets_by_type(wallets)
    ordered = []
    for wallet_type in WALLET_TYPE_ORDER:
        ordered.extend(sorted(grouped[wallet_type], key=lambda wallet: (wallet.sort_order, wallet.id)))
    return ordered
