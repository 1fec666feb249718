import argparse
import asyncio
import json
import logging
import sys

from typing import List, Optional

from aptos_nft_market.ledger.notifications import LoggingNotifier
from aptos_nft_market.ledger.rest_client import AptosRestClient
from aptos_nft_market.marketplace.fetcher import ChainRecordFetcher
from aptos_nft_market.marketplace.models import Page, SortDirection, SortKey
from aptos_nft_market.marketplace.session import (
    MarketBrowseView,
    MarketplaceView,
    OwnerCollectionView,
)
from aptos_nft_market.utils.config import Config
from aptos_nft_market.utils.logging import configure_logging


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse the NFT marketplace or an owner's collection"
    )
    parser.add_argument("-c", "--config", help="Path to config file", required=True)
    parser.add_argument("--owner", help="Show the NFTs held by this account instead of listings")
    parser.add_argument("--rarity", type=int, choices=[1, 2, 3, 4], help="Only show this rarity tier")
    parser.add_argument("--sort", choices=[d.value for d in SortDirection], default=SortDirection.ASC.value)
    parser.add_argument(
        "--sort-key",
        choices=[k.value for k in SortKey],
        default=SortKey.PRICE.value,
        help="Owner collections only; listings are always sorted by price",
    )
    parser.add_argument("--page", type=int, default=1)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if not args.owner and args.sort_key != SortKey.PRICE.value:
        parser.error("--sort-key only applies together with --owner")
    return args


async def browse(
    config: Config, args: argparse.Namespace, rest_client: AptosRestClient
) -> Optional[Page]:
    fetcher = ChainRecordFetcher(rest_client, config)
    notifier = LoggingNotifier()
    direction = SortDirection(args.sort)

    view: MarketplaceView
    if args.owner:
        view = OwnerCollectionView(fetcher, notifier, config, owner=args.owner)
        if not await view.refresh():
            return None
        view.set_rarity(args.rarity)
        view.set_sort_key(SortKey(args.sort_key), direction)
    else:
        view = MarketBrowseView(fetcher, notifier, config, rarity=args.rarity, direction=direction)
        if not await view.refresh():
            return None

    return view.set_page(args.page)


async def run(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = Config.from_yaml_file(args.config)

    async with AptosRestClient(config.ledger_config) as rest_client:
        page = await browse(config, args, rest_client)

    if page is None:
        return 1
    print(json.dumps(page.to_dict(), indent=2))
    return 0


def main() -> None:
    configure_logging(logging.INFO)
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
