from dataclasses import dataclass, field
from typing import Tuple

from aptos_nft_market.marketplace import constants
from aptos_nft_market.marketplace.models import NFT
from aptos_nft_market.utils.config import Config
from aptos_nft_market.utils.errors import ValidationError
from aptos_nft_market.utils.general_utils import parse_apt_amount


@dataclass(frozen=True)
class TransactionIntent:
    # <module address>::<module>::<entry function>
    function: str
    arguments: Tuple[str, ...]
    type_arguments: Tuple[str, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict:
        return {
            "type": "entry_function_payload",
            "function": self.function,
            "type_arguments": list(self.type_arguments),
            "arguments": list(self.arguments),
        }


def _entry_function(config: Config, function_name: str) -> str:
    return config.marketplace_config.function_id(function_name)


def build_purchase_intent(config: Config, nft: NFT) -> TransactionIntent:
    marketplace_address = config.marketplace_config.marketplace_address
    return TransactionIntent(
        function=_entry_function(config, constants.PURCHASE_NFT),
        arguments=(marketplace_address, str(nft.id), str(nft.price_octas)),
    )


def build_list_for_sale_intent(
    config: Config, nft: NFT, price_text: str
) -> TransactionIntent:
    price_octas = parse_apt_amount(price_text, field="sale price")
    marketplace_address = config.marketplace_config.marketplace_address
    return TransactionIntent(
        function=_entry_function(config, constants.LIST_FOR_SALE),
        arguments=(marketplace_address, str(nft.id), str(price_octas)),
    )


def build_tip_intent(config: Config, nft: NFT, amount_text: str) -> TransactionIntent:
    tip_octas = parse_apt_amount(amount_text, field="tip amount")
    return TransactionIntent(
        function=_entry_function(config, constants.TIP_OWNER),
        arguments=(nft.owner, str(nft.id), str(tip_octas)),
    )


def build_transfer_intent(
    config: Config, nft: NFT, recipient_address: str
) -> TransactionIntent:
    # The address format is checked by the contract, not here
    if not recipient_address or not recipient_address.strip():
        raise ValidationError("Recipient address is required.")
    marketplace_address = config.marketplace_config.marketplace_address
    return TransactionIntent(
        function=_entry_function(config, constants.TRANSFER_OWNERSHIP),
        arguments=(marketplace_address, str(nft.id), recipient_address.strip()),
    )
