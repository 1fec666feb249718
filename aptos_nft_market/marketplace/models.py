import math

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
from typing_extensions import TypedDict

from aptos_nft_market.utils.general_utils import (
    apt_to_octas,
    format_apt,
    truncate_address,
)


class SortKey(Enum):
    PRICE = "price"
    RARITY = "rarity"
    # Fetch order, unsorted
    ALL = "all"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


class ActionKind(Enum):
    PURCHASE = "purchase"
    LIST_FOR_SALE = "list_for_sale"
    TIP = "tip"
    GIFT = "gift"


@dataclass(frozen=True)
class RarityTier:
    tier: int
    label: str
    color: str


RARITY_TIERS = {
    1: RarityTier(1, "Common", "green"),
    2: RarityTier(2, "Uncommon", "blue"),
    3: RarityTier(3, "Rare", "purple"),
    4: RarityTier(4, "Super Rare", "orange"),
}


def get_rarity_tier(rarity: int) -> RarityTier:
    # Tiers outside the table are displayed, never rejected
    return RARITY_TIERS.get(rarity, RarityTier(rarity, "Unknown", "default"))


# Shape of one entry of the Marketplace resource `nfts` vector as returned by the fullnode.
# u64 values are serialized as strings and vector<u8> values as 0x-prefixed hex.
class RawNFTRecord(TypedDict):
    id: str
    owner: str
    name: str
    description: str
    uri: str
    price: str
    for_sale: bool
    rarity: int


@dataclass(frozen=True)
class NFT:
    id: int
    owner: str
    name: str
    description: str
    uri: str
    # Display denomination (APT)
    price: float
    for_sale: bool
    rarity: int

    @property
    def price_octas(self) -> int:
        return apt_to_octas(self.price)

    @property
    def rarity_label(self) -> str:
        return get_rarity_tier(self.rarity).label

    @property
    def rarity_color(self) -> str:
        return get_rarity_tier(self.rarity).color

    @property
    def display_price(self) -> str:
        return format_apt(self.price)

    @property
    def short_owner(self) -> str:
        return truncate_address(self.owner)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner": self.owner,
            "name": self.name,
            "description": self.description,
            "uri": self.uri,
            "price": self.price,
            "for_sale": self.for_sale,
            "rarity": self.rarity,
            "rarity_label": self.rarity_label,
        }


@dataclass(frozen=True)
class FilterCriteria:
    # None means "all"
    rarity: Optional[int] = None
    min_price: Optional[float] = None
    # None means unbounded
    max_price: Optional[float] = None
    for_sale_only: bool = False


@dataclass(frozen=True)
class SortCriteria:
    key: SortKey = SortKey.PRICE
    direction: SortDirection = SortDirection.ASC


@dataclass
class Page:
    items: List[NFT]
    page_number: int
    page_size: int
    # Size of the filtered set, not of the raw fetch
    total: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        self.total_pages = math.ceil(self.total / self.page_size) if self.page_size > 0 else 0

    def to_dict(self) -> dict:
        return {
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
            "items": [nft.to_dict() for nft in self.items],
        }
