"""
Block explorer transaction oracle.

Looks transaction hashes up on EVM networks through JSON-RPC and on TRON
through the Tronscan API. Every failure or timeout counts as "not found"
for that network; there is no retry.
"""

from typing import Any

import aiohttp
from loguru import logger

from app.config.settings import Settings, settings as default_settings
from app.services.oracle.decoding import (
    parse_evm_lookup,
    parse_tronscan_lookup,
)
from app.services.oracle.lookup import TransactionLookup


class ExplorerTransactionOracle:
    """
    TransactionOracle backed by public explorers.

    EVM hashes (0x-prefixed) are tried on BSC, Ethereum and Polygon in that
    order; other hashes go to Tronscan.
    """

    def __init__(
        self,
        config: Settings | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        config = config or default_settings
        self.rpc_urls: dict[str, str] = {
            "BSC": config.bsc_rpc_url,
            "ETHEREUM": config.eth_rpc_url,
            "POLYGON": config.polygon_rpc_url,
        }
        self.tronscan_url = config.tronscan_api_url
        self.timeout = aiohttp.ClientTimeout(
            total=config.explorer_timeout_seconds
        )
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this oracle created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def check_transaction_across_networks(
        self, tx_hash: str
    ) -> TransactionLookup:
        """
        Look a transaction up on every supported network.

        Args:
            tx_hash: Transaction hash

        Returns:
            First found lookup, or TransactionLookup.not_found()
        """
        tx_hash = tx_hash.strip()

        if tx_hash.lower().startswith("0x"):
            for network, url in self.rpc_urls.items():
                lookup = await self.lookup_evm(network, url, tx_hash)
                if lookup.found:
                    return lookup
            return TransactionLookup.not_found()

        return await self.lookup_tron(tx_hash)

    async def lookup_evm(
        self, network: str, rpc_url: str, tx_hash: str
    ) -> TransactionLookup:
        """Look a hash up on one EVM network."""
        tx = await self._rpc_call(
            rpc_url, "eth_getTransactionByHash", [tx_hash]
        )
        if not tx:
            return TransactionLookup.not_found()

        receipt = await self._rpc_call(
            rpc_url, "eth_getTransactionReceipt", [tx_hash]
        )
        lookup = parse_evm_lookup(network, tx, receipt)

        logger.debug(
            "EVM transaction found",
            extra={
                "network": network,
                "tx_hash": tx_hash,
                "confirmed": lookup.confirmed,
            },
        )
        return lookup

    async def lookup_tron(self, tx_hash: str) -> TransactionLookup:
        """Look a hash up on Tronscan."""
        try:
            session = await self._get_session()
            async with session.get(
                self.tronscan_url,
                params={"hash": tx_hash},
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            ) as response:
                if response.status != 200:
                    logger.warning(
                        "Tronscan error: HTTP {}",
                        response.status,
                        extra={"tx_hash": tx_hash},
                    )
                    return TransactionLookup.not_found()
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.warning(
                "Tronscan request failed: {}", e, extra={"tx_hash": tx_hash}
            )
            return TransactionLookup.not_found()

        return parse_tronscan_lookup(data)

    async def _rpc_call(
        self, rpc_url: str, method: str, params: list
    ) -> Any:
        """
        Make JSON-RPC call.

        Args:
            rpc_url: Endpoint
            method: RPC method name
            params: RPC parameters

        Returns:
            Result or None on error
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }

        try:
            session = await self._get_session()
            async with session.post(
                rpc_url,
                json=payload,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            ) as response:
                if response.status != 200:
                    logger.warning(f"RPC error: HTTP {response.status}")
                    return None
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.warning(f"RPC request failed: {e}")
            return None

        if "error" in data:
            logger.debug(f"RPC error: {data['error']}")
            return None
        return data.get("result")
