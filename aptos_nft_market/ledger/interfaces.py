from dataclasses import dataclass
from typing import Any, List, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from aptos_nft_market.marketplace.intents import TransactionIntent


@dataclass(frozen=True)
class TransactionHandle:
    hash: str


class LedgerReader(Protocol):
    async def read_resource(self, address: str, resource_type: str) -> dict:
        ...

    async def call_view(
        self, function: str, type_arguments: Sequence[str], arguments: Sequence[str]
    ) -> List[Any]:
        ...


class WalletSigner(Protocol):
    # Obtains user authorization and submits the transaction
    async def submit(self, intent: "TransactionIntent") -> TransactionHandle:
        ...

    # Suspends until the transaction is committed; raises on rejection, network error or abort
    async def await_finalization(self, handle: TransactionHandle) -> None:
        ...


class Notifier(Protocol):
    def success(self, text: str) -> None:
        ...

    def error(self, text: str) -> None:
        ...
