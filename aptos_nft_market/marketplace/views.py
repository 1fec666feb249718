"""
Filter, sort and paginate transforms over a fetched NFT set.

All functions are pure: they never mutate their input and the same arguments always
produce the same page.
"""

import math

from typing import Iterable, List

from aptos_nft_market.marketplace.models import (
    NFT,
    FilterCriteria,
    Page,
    SortCriteria,
    SortDirection,
    SortKey,
)


def matches_filter(nft: NFT, criteria: FilterCriteria) -> bool:
    if criteria.for_sale_only and not nft.for_sale:
        return False
    if criteria.rarity is not None and nft.rarity != criteria.rarity:
        return False
    min_price = criteria.min_price if criteria.min_price is not None else -math.inf
    max_price = criteria.max_price if criteria.max_price is not None else math.inf
    return min_price <= nft.price <= max_price


def filter_nfts(nfts: Iterable[NFT], criteria: FilterCriteria) -> List[NFT]:
    return [nft for nft in nfts if matches_filter(nft, criteria)]


def sort_nfts(nfts: Iterable[NFT], sort: SortCriteria) -> List[NFT]:
    """
    Order by a single numeric key.

    `sorted` is stable, and with reverse=True it still keeps records with equal keys in
    their fetch order, so ties never reshuffle between recomputations. SortKey.ALL keeps
    the fetch order as is.
    """
    if sort.key == SortKey.ALL:
        return list(nfts)
    if sort.key == SortKey.RARITY:
        key = lambda nft: nft.rarity
    else:
        key = lambda nft: nft.price
    return sorted(nfts, key=key, reverse=sort.direction == SortDirection.DESC)


def paginate(nfts: List[NFT], page: int, page_size: int) -> List[NFT]:
    # 1-based pages; anything out of range is an empty page
    if page < 1 or page_size < 1:
        return []
    return nfts[(page - 1) * page_size : page * page_size]


def build_page(
    nfts: Iterable[NFT],
    criteria: FilterCriteria,
    sort: SortCriteria,
    page: int,
    page_size: int,
) -> Page:
    ordered = sort_nfts(filter_nfts(nfts, criteria), sort)
    return Page(
        items=paginate(ordered, page, page_size),
        page_number=page,
        page_size=page_size,
        total=len(ordered),
    )
