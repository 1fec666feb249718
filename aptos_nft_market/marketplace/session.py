import logging

from abc import ABC, abstractmethod
from typing import List, Optional

from aptos_nft_market.ledger.interfaces import Notifier
from aptos_nft_market.marketplace.fetcher import ChainRecordFetcher
from aptos_nft_market.marketplace.models import (
    NFT,
    FilterCriteria,
    Page,
    SortCriteria,
    SortDirection,
    SortKey,
)
from aptos_nft_market.marketplace.views import build_page
from aptos_nft_market.utils.config import Config
from aptos_nft_market.utils.errors import MarketplaceError


class MarketplaceView(ABC):
    """
    In-memory view state for one browsing surface: the fetched records, the active
    criteria and the 1-based page counter. Records are only ever replaced wholesale.
    """

    fetch_failed_message = "Failed to fetch NFTs."

    def __init__(
        self,
        fetcher: ChainRecordFetcher,
        notifier: Notifier,
        config: Config,
        criteria: Optional[FilterCriteria] = None,
        sort: Optional[SortCriteria] = None,
    ):
        self.fetcher = fetcher
        self.notifier = notifier
        self.page_size = config.page_size
        self.criteria = criteria or FilterCriteria()
        self.sort = sort or SortCriteria()
        self.nfts: List[NFT] = []
        self.page_number = 1

    @abstractmethod
    async def fetch(self) -> List[NFT]:
        pass

    def on_fetched(self) -> None:
        pass

    async def refresh(self) -> bool:
        try:
            nfts = await self.fetch()
        except MarketplaceError:
            logging.exception(
                "[View] Error fetching NFTs", extra={"view": type(self).__name__}
            )
            self.notifier.error(self.fetch_failed_message)
            return False

        self.nfts = nfts
        self.on_fetched()
        return True

    def current_page(self) -> Page:
        return build_page(
            self.nfts, self.criteria, self.sort, self.page_number, self.page_size
        )

    def set_page(self, page_number: int) -> Page:
        self.page_number = page_number
        return self.current_page()


class MarketBrowseView(MarketplaceView):
    """
    Marketplace listings. Only records that are for sale are visible, and every change of
    criteria re-queries the ledger and starts again from page 1.
    """

    def __init__(self, fetcher, notifier, config, rarity=None, direction=SortDirection.ASC):
        super().__init__(
            fetcher,
            notifier,
            config,
            criteria=FilterCriteria(rarity=rarity, for_sale_only=True),
            sort=SortCriteria(key=SortKey.PRICE, direction=direction),
        )

    async def fetch(self) -> List[NFT]:
        return await self.fetcher.fetch_market_nfts()

    def on_fetched(self) -> None:
        self.page_number = 1

    async def set_rarity(self, rarity: Optional[int]) -> bool:
        return await self._requery(
            FilterCriteria(rarity=rarity, for_sale_only=True), self.sort
        )

    async def set_sort_direction(self, direction: SortDirection) -> bool:
        return await self._requery(
            self.criteria, SortCriteria(key=SortKey.PRICE, direction=direction)
        )

    async def _requery(self, criteria: FilterCriteria, sort: SortCriteria) -> bool:
        previous = (self.criteria, self.sort)
        self.criteria, self.sort = criteria, sort
        if not await self.refresh():
            # A failed re-query leaves the visible set as it was
            self.criteria, self.sort = previous
            return False
        return True


class OwnerCollectionView(MarketplaceView):
    """
    NFTs held by one account. Criteria changes recompute over the records already held
    and keep the current page; only `refresh` goes back to the ledger.
    """

    fetch_failed_message = "Failed to fetch your NFTs."

    def __init__(self, fetcher, notifier, config, owner: str):
        super().__init__(fetcher, notifier, config)
        self.owner = owner

    async def fetch(self) -> List[NFT]:
        return await self.fetcher.fetch_owner_nfts(self.owner)

    def set_rarity(self, rarity: Optional[int]) -> Page:
        self.criteria = FilterCriteria(
            rarity=rarity,
            min_price=self.criteria.min_price,
            max_price=self.criteria.max_price,
        )
        return self.current_page()

    def set_price_range(
        self, min_price: Optional[float], max_price: Optional[float]
    ) -> Page:
        self.criteria = FilterCriteria(
            rarity=self.criteria.rarity, min_price=min_price, max_price=max_price
        )
        return self.current_page()

    def set_sort_key(
        self, key: SortKey, direction: SortDirection = SortDirection.ASC
    ) -> Page:
        self.sort = SortCriteria(key=key, direction=direction)
        return self.current_page()
