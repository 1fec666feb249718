"""
Aptos fullnode REST access for the marketplace client.

`AptosRestClient` satisfies the LedgerReader interface and also knows how to wait for a
transaction to be committed. `FinalizingWalletSigner` pairs it with the wallet's own
sign-and-submit call so that workflows only ever see a WalletSigner.
"""

import asyncio
import httpx
import logging

from typing import Any, Awaitable, Callable, List, Optional, Sequence, TYPE_CHECKING

from aptos_nft_market.ledger.interfaces import TransactionHandle
from aptos_nft_market.utils.config import LedgerConfig
from aptos_nft_market.utils.errors import RetrievalError, SubmissionError

if TYPE_CHECKING:
    from aptos_nft_market.marketplace.intents import TransactionIntent

# Delay between polls while the fullnode still reports the transaction as pending
PENDING_POLL_INTERVAL_IN_SECS = 1.0


class AptosRestClient:
    def __init__(
        self,
        ledger_config: LedgerConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.ledger_config = ledger_config
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            base_url=ledger_config.fullnode_url,
            timeout=ledger_config.request_timeout_in_secs,
        )

    async def __aenter__(self) -> "AptosRestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_http_client:
            await self.http_client.aclose()

    async def read_resource(self, address: str, resource_type: str) -> dict:
        return await self._request(
            "GET", f"/accounts/{address}/resource/{resource_type}"
        )

    async def call_view(
        self, function: str, type_arguments: Sequence[str], arguments: Sequence[str]
    ) -> List[Any]:
        result = await self._request(
            "POST",
            "/view",
            json={
                "function": function,
                "type_arguments": list(type_arguments),
                "arguments": list(arguments),
            },
        )
        if not isinstance(result, list):
            raise RetrievalError(f"View {function} returned {type(result).__name__}, expected a list")
        return result

    async def wait_for_transaction(self, transaction_hash: str) -> dict:
        while True:
            try:
                response = await self.http_client.get(
                    f"/transactions/wait_by_hash/{transaction_hash}"
                )
                # The wallet submits through its own node, so this one may not know the hash yet
                if response.status_code == 404:
                    await asyncio.sleep(PENDING_POLL_INTERVAL_IN_SECS)
                    continue
                response.raise_for_status()
                transaction = response.json()
            except httpx.HTTPError as e:
                raise SubmissionError(
                    f"Failed to wait for transaction {transaction_hash}: {e}"
                ) from e

            if transaction.get("type") == "pending_transaction":
                await asyncio.sleep(PENDING_POLL_INTERVAL_IN_SECS)
                continue

            if not transaction.get("success", False):
                raise SubmissionError(
                    f"Transaction {transaction_hash} failed: {transaction.get('vm_status')}"
                )

            logging.info(
                "[RestClient] Transaction committed",
                extra={
                    "transaction_hash": transaction_hash,
                    "version": transaction.get("version"),
                },
            )
            return transaction

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self.http_client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise RetrievalError(
                f"{method} {path} returned {e.response.status_code}: {e.response.text}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise RetrievalError(f"{method} {path} failed: {e}") from e


class FinalizingWalletSigner:
    def __init__(
        self,
        sign_and_submit: Callable[[dict], Awaitable[dict]],
        rest_client: AptosRestClient,
    ):
        # sign_and_submit is the wallet bridge; it takes an entry function payload and returns {"hash": ...}
        self.sign_and_submit = sign_and_submit
        self.rest_client = rest_client

    async def submit(self, intent: "TransactionIntent") -> TransactionHandle:
        try:
            response = await self.sign_and_submit(intent.to_payload())
        except SubmissionError:
            raise
        except Exception as e:
            raise SubmissionError(f"Wallet rejected {intent.function}: {e}") from e

        transaction_hash = response.get("hash") if isinstance(response, dict) else None
        if not transaction_hash:
            raise SubmissionError(f"Wallet returned no transaction hash for {intent.function}")
        return TransactionHandle(hash=transaction_hash)

    async def await_finalization(self, handle: TransactionHandle) -> None:
        await self.rest_client.wait_for_transaction(handle.hash)
