"""
Pytest configuration and shared fakes for the marketplace client tests.

The three external capabilities (ledger reader, wallet signer, notifier) are replaced by
in-memory fakes so every component can be exercised without a fullnode or a wallet.
"""

import asyncio

import pytest

from aptos_nft_market.ledger.interfaces import TransactionHandle
from aptos_nft_market.marketplace.decoder import encode_hex_field
from aptos_nft_market.marketplace.models import NFT
from aptos_nft_market.utils.config import Config, LedgerConfig, MarketplaceConfig
from aptos_nft_market.utils.errors import RetrievalError, SubmissionError


# =============================================================================
# Test Data
# =============================================================================

MARKETPLACE_ADDRESS = "0x2183e1e73c81b2246c1e2ad7c8b899719a76e08cae4f4df843b882a33b550f7f"
OWNER_ADDRESS = "0x9a1c3b5e7f4d2a6c8e0b1d3f5a7c9e1b3d5f7a9c1e3b5d7f9a1c3e5b7d9f1a3c"
RECIPIENT_ADDRESS = "0x5e7f4d2a6c8e0b1d3f5a7c9e1b3d5f7a9c1e3b5d7f9a1c3e5b7d9f1a3c9a1c3b"
TRANSACTION_HASH = "0x6f3c1d2e4b5a69788796a5b4c3d2e1f00f1e2d3c4b5a69788796a5b4c3d2e1f0"


def make_raw_nft(
    nft_id,
    price_octas=100_000_000,
    rarity=1,
    for_sale=True,
    owner=OWNER_ADDRESS,
    name=None,
    description="A test NFT",
    uri="https://example.com/nft.png",
):
    """One entry of the Marketplace resource as the fullnode serializes it."""
    return {
        "id": str(nft_id),
        "owner": owner,
        "name": encode_hex_field(name if name is not None else f"NFT #{nft_id}"),
        "description": encode_hex_field(description),
        "uri": encode_hex_field(uri),
        "price": str(price_octas),
        "for_sale": for_sale,
        "rarity": rarity,
    }


def make_nft_details(nft_id, **kwargs):
    """The value list returned by the get_nft_details view."""
    raw = make_raw_nft(nft_id, **kwargs)
    return [
        raw["id"],
        raw["owner"],
        raw["name"],
        raw["description"],
        raw["uri"],
        raw["price"],
        raw["for_sale"],
        raw["rarity"],
    ]


def make_nft(nft_id, price=1.0, rarity=1, for_sale=True, owner=OWNER_ADDRESS):
    return NFT(
        id=nft_id,
        owner=owner,
        name=f"NFT #{nft_id}",
        description="A test NFT",
        uri="https://example.com/nft.png",
        price=price,
        for_sale=for_sale,
        rarity=rarity,
    )


# =============================================================================
# Fakes
# =============================================================================


class FakeLedgerReader:
    def __init__(self, resource=None, owner_ids=None, details=None):
        # Any of these may be an exception instance, which is raised instead of returned
        self.resource = resource
        self.owner_ids = owner_ids if owner_ids is not None else []
        self.details = details or {}
        self.resource_reads = []
        self.view_calls = []

    async def read_resource(self, address, resource_type):
        self.resource_reads.append((address, resource_type))
        if isinstance(self.resource, Exception):
            raise self.resource
        return self.resource

    async def call_view(self, function, type_arguments, arguments):
        self.view_calls.append((function, list(type_arguments), list(arguments)))
        if function.endswith("::get_all_nfts_for_owner"):
            if isinstance(self.owner_ids, Exception):
                raise self.owner_ids
            return [[str(nft_id) for nft_id in self.owner_ids]]
        if function.endswith("::get_nft_details"):
            # Let the other detail calls interleave
            await asyncio.sleep(0)
            result = self.details.get(int(arguments[1]))
            if result is None:
                raise RetrievalError(f"NFT {arguments[1]} not found")
            if isinstance(result, Exception):
                raise result
            return result
        raise RetrievalError(f"Unknown view function {function}")


class FakeWalletSigner:
    def __init__(self, submit_error=None, finalize_error=None, never_finalize=False):
        self.submit_error = submit_error
        self.finalize_error = finalize_error
        self.never_finalize = never_finalize
        self.submitted = []
        self.finalized = []

    async def submit(self, intent):
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(intent)
        return TransactionHandle(hash=TRANSACTION_HASH)

    async def await_finalization(self, handle):
        if self.never_finalize:
            await asyncio.Event().wait()
        if self.finalize_error is not None:
            raise self.finalize_error
        self.finalized.append(handle)


class RecordingNotifier:
    def __init__(self):
        self.successes = []
        self.errors = []

    def success(self, text):
        self.successes.append(text)

    def error(self, text):
        self.errors.append(text)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def config():
    return Config(
        marketplace_config=MarketplaceConfig(marketplace_address=MARKETPLACE_ADDRESS),
        ledger_config=LedgerConfig(finalization_timeout_in_secs=0.05),
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def signer():
    return FakeWalletSigner()


@pytest.fixture
def rejecting_signer():
    return FakeWalletSigner(submit_error=SubmissionError("User rejected the request"))
