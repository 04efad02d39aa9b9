"""
Peer directory for state channel counterparties.

Holds an immutable snapshot of peers; lookups filter by chain and
liquidity pool and rank by reputation.
"""

from collections.abc import Iterable

from chainarb.core.types import Peer


DEFAULT_PEERS: tuple[Peer, ...] = (
    Peer(
        address="0xA1b2C3d4E5f6789012345678901234567890abcd",
        reputation=95,
        chains=frozenset({"Ethereum", "Polygon", "Arbitrum"}),
        liquidity_pools=frozenset({"WETH/USDC", "WBTC/USDT", "DAI/USDC"}),
    ),
    Peer(
        address="0xB2c3D4e5F6789012345678901234567890abcdef",
        reputation=88,
        chains=frozenset({"Ethereum", "BSC"}),
        liquidity_pools=frozenset({"USDT/USDC", "WETH/USDT", "WBTC/DAI"}),
    ),
    Peer(
        address="0xC3d4E5f6789012345678901234567890abcdef01",
        reputation=92,
        chains=frozenset({"Polygon", "Arbitrum", "Optimism"}),
        liquidity_pools=frozenset({"MATIC/USDC", "WETH/USDC", "ARB/USDT"}),
    ),
)


class PeerDirectory:
    """
    Read-only registry of counterparties.

    The snapshot is a tuple of frozen records, so concurrent readers
    never observe partial state.
    """

    def __init__(self, peers: Iterable[Peer] | None = None) -> None:
        """
        Initialize directory.

        Args:
            peers: Peer records (default: built-in registry).
        """
        snapshot = tuple(DEFAULT_PEERS if peers is None else peers)
        for peer in snapshot:
            if not 0 <= peer.reputation <= 100:
                raise ValueError(f"Peer {peer.address} reputation out of range: {peer.reputation}")
        self._peers = snapshot

    def find(
        self,
        chains: list[str] | tuple[str, ...],
        pairs: list[str] | tuple[str, ...] | None = None,
    ) -> list[Peer]:
        """
        Find peers for a set of chains and, optionally, trading pairs.

        Args:
            chains: A peer must advertise at least one of these chains.
            pairs: If non-empty, a peer must also offer at least one of these pools.

        Returns:
            Matching peers, highest reputation first.
        """
        matches = [
            peer
            for peer in self._peers
            if peer.supports_any_chain(chains) and (not pairs or peer.has_any_pool(pairs))
        ]
        return sorted(matches, key=lambda p: p.reputation, reverse=True)

    def by_chain(self, chains: list[str] | tuple[str, ...]) -> list[Peer]:
        """Peers advertising any of the chains, highest reputation first."""
        return self.find(chains)

    def get(self, address: str) -> Peer | None:
        """Look up a peer by address (case-insensitive)."""
        needle = address.lower()
        for peer in self._peers:
            if peer.address.lower() == needle:
                return peer
        return None

    @property
    def peers(self) -> tuple[Peer, ...]:
        """Full snapshot."""
        return self._peers

    @property
    def chains(self) -> frozenset[str]:
        """Every chain any peer advertises."""
        return frozenset(chain for peer in self._peers for chain in peer.chains)

    def __len__(self) -> int:
        return len(self._peers)
