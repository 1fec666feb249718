import asyncio
import logging

from time import perf_counter
from typing import Any, List, Optional

from aptos_nft_market.ledger.interfaces import LedgerReader
from aptos_nft_market.marketplace import constants
from aptos_nft_market.marketplace.decoder import (
    decode_nft_details,
    decode_nft_resource_entry,
    decode_u64,
)
from aptos_nft_market.marketplace.models import NFT
from aptos_nft_market.utils.config import Config
from aptos_nft_market.utils.errors import DecodeError, RetrievalError
from aptos_nft_market.utils.metrics import (
    EXCLUDED_RECORDS_COUNTER,
    MARKETPLACE_FETCHES_COUNTER,
)

MARKET_MODE = "market"
OWNER_MODE = "owner"


class ChainRecordFetcher:
    def __init__(self, ledger_reader: LedgerReader, config: Config):
        self.ledger_reader = ledger_reader
        self.config = config

    @property
    def marketplace_address(self) -> str:
        return self.config.marketplace_config.marketplace_address

    # Reads the aggregate Marketplace resource and decodes every entry.
    # A single undecodable entry fails the whole batch.
    async def fetch_market_nfts(self) -> List[NFT]:
        start_time = perf_counter()
        resource_type = self.config.marketplace_config.resource_type()
        try:
            try:
                resource = await self.ledger_reader.read_resource(
                    self.marketplace_address, resource_type
                )
            except RetrievalError:
                raise
            except Exception as e:
                raise RetrievalError(
                    f"Failed to read {resource_type} from {self.marketplace_address}: {e}"
                ) from e

            raw_nfts = self._get_resource_nfts(resource)
            nfts = [decode_nft_resource_entry(raw_nft) for raw_nft in raw_nfts]
        except (RetrievalError, DecodeError):
            MARKETPLACE_FETCHES_COUNTER.labels(mode=MARKET_MODE, outcome="failure").inc()
            raise

        MARKETPLACE_FETCHES_COUNTER.labels(mode=MARKET_MODE, outcome="success").inc()
        logging.info(
            "[Fetcher] Fetched marketplace NFTs",
            extra={
                "marketplace_address": self.marketplace_address,
                "count": len(nfts),
                "duration_in_secs": str(format(perf_counter() - start_time, ".8f")),
            },
        )
        return nfts

    # Two phase fetch: owner index view, then one details view per id issued concurrently.
    # Ids whose details cannot be fetched or decoded are left out of the result.
    async def fetch_owner_nfts(
        self,
        owner: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[NFT]:
        start_time = perf_counter()
        limit = self.config.owner_nfts_limit if limit is None else limit
        offset = self.config.owner_nfts_offset if offset is None else offset

        try:
            nft_ids = await self.fetch_owner_nft_ids(owner, limit, offset)
        except (RetrievalError, DecodeError):
            MARKETPLACE_FETCHES_COUNTER.labels(mode=OWNER_MODE, outcome="failure").inc()
            raise

        if not nft_ids:
            logging.info("[Fetcher] No NFTs found for owner", extra={"owner": owner})
            MARKETPLACE_FETCHES_COUNTER.labels(mode=OWNER_MODE, outcome="success").inc()
            return []

        results = await asyncio.gather(
            *[self.fetch_nft_details(nft_id) for nft_id in nft_ids],
            return_exceptions=True,
        )

        nfts = []
        for nft_id, result in zip(nft_ids, results):
            if isinstance(result, BaseException):
                reason = "decode" if isinstance(result, DecodeError) else "retrieval"
                EXCLUDED_RECORDS_COUNTER.labels(reason=reason).inc()
                logging.warning(
                    "[Fetcher] Error fetching details for NFT. Excluding it.",
                    extra={
                        "owner": owner,
                        "nft_id": nft_id,
                        "error": str(result),
                        "error_type": type(result).__name__,
                    },
                    exc_info=result,
                )
                continue
            nfts.append(result)

        MARKETPLACE_FETCHES_COUNTER.labels(mode=OWNER_MODE, outcome="success").inc()
        logging.info(
            "[Fetcher] Fetched owner NFTs",
            extra={
                "owner": owner,
                "requested": len(nft_ids),
                "count": len(nfts),
                "duration_in_secs": str(format(perf_counter() - start_time, ".8f")),
            },
        )
        return nfts

    async def fetch_owner_nft_ids(self, owner: str, limit: int, offset: int) -> List[int]:
        function = self.config.marketplace_config.function_id(
            constants.GET_ALL_NFTS_FOR_OWNER
        )
        response = await self._call_view(
            function, [self.marketplace_address, owner, str(limit), str(offset)]
        )
        # The view returns a single vector<u64>, which arrives wrapped as [[...]]
        nft_ids = response[0] if response and isinstance(response[0], list) else response
        return [decode_u64(nft_id, "nft_id") for nft_id in nft_ids]

    async def fetch_nft_details(self, nft_id: int) -> NFT:
        function = self.config.marketplace_config.function_id(constants.GET_NFT_DETAILS)
        details = await self._call_view(function, [self.marketplace_address, str(nft_id)])
        return decode_nft_details(details)

    async def _call_view(self, function: str, arguments: List[str]) -> List[Any]:
        try:
            return await self.ledger_reader.call_view(function, [], arguments)
        except RetrievalError:
            raise
        except Exception as e:
            raise RetrievalError(f"View {function} failed: {e}") from e

    @staticmethod
    def _get_resource_nfts(resource: Any) -> list:
        data = resource.get("data", resource) if isinstance(resource, dict) else None
        nfts = data.get("nfts") if isinstance(data, dict) else None
        if not isinstance(nfts, list):
            raise DecodeError("Marketplace resource has no nfts list")
        return nfts
