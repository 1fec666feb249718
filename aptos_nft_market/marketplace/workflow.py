"""
Confirm-then-submit workflows, one state machine per action kind.

    IDLE -> SELECTING -> CONFIRMING -> SUBMITTING -> SETTLED -> IDLE
                             ^  |                       |
                             |  +--- cancel -> IDLE     |
                             +------ failure -----------+   (unless close_on_failure)

A workflow captures the selected NFT as it was when selected; the record is never re-read
before submission. Listeners registered with `add_listener` observe every transition, which
is how a renderer opens and closes its confirmation surface.
"""

import asyncio
import logging

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from aptos_nft_market.ledger.interfaces import Notifier, WalletSigner
from aptos_nft_market.marketplace import constants
from aptos_nft_market.marketplace.intents import (
    TransactionIntent,
    build_list_for_sale_intent,
    build_purchase_intent,
    build_tip_intent,
    build_transfer_intent,
)
from aptos_nft_market.marketplace.models import NFT, ActionKind
from aptos_nft_market.utils.config import Config
from aptos_nft_market.utils.errors import (
    MarketplaceError,
    SubmissionError,
    SubmissionTimedOut,
    ValidationError,
    WorkflowStateError,
)
from aptos_nft_market.utils.metrics import WORKFLOW_OUTCOMES_COUNTER


class WorkflowState(Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    CONFIRMING = "confirming"
    SUBMITTING = "submitting"
    SETTLED = "settled"


@dataclass
class WorkflowResult:
    action: ActionKind
    success: bool
    transaction_hash: Optional[str] = None
    error: Optional[MarketplaceError] = None


TransitionListener = Callable[[WorkflowState, WorkflowState], None]


class ConfirmationWorkflow(ABC):
    action: ActionKind
    success_message: str
    failure_message: str

    def __init__(
        self,
        config: Config,
        signer: WalletSigner,
        notifier: Notifier,
        on_success: Optional[Callable[[], Awaitable[None]]] = None,
        close_on_failure: bool = False,
    ):
        self.config = config
        self.signer = signer
        self.notifier = notifier
        self.on_success = on_success
        # Whether a failed submission closes the confirmation surface or leaves it open for a retry
        self.close_on_failure = close_on_failure
        self.state = WorkflowState.IDLE
        self.selected_nft: Optional[NFT] = None
        self.last_error: Optional[MarketplaceError] = None
        self._listeners: List[TransitionListener] = []

    def add_listener(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    @property
    def is_open(self) -> bool:
        return self.state in (WorkflowState.CONFIRMING, WorkflowState.SUBMITTING)

    def select(self, nft: NFT) -> None:
        self._require_state(WorkflowState.IDLE)
        self.check_selectable(nft)
        self.selected_nft = nft
        self.last_error = None
        self._transition(WorkflowState.SELECTING)

    def open(self) -> None:
        self._require_state(WorkflowState.SELECTING)
        self.reset_inputs()
        self._transition(WorkflowState.CONFIRMING)

    def start(self, nft: NFT) -> None:
        self.select(nft)
        self.open()

    def cancel(self) -> None:
        self._require_state(WorkflowState.SELECTING, WorkflowState.CONFIRMING)
        self._clear()
        self._transition(WorkflowState.IDLE)

    async def confirm(self) -> WorkflowResult:
        self._require_state(WorkflowState.CONFIRMING)

        try:
            intent = self.build_intent(self.selected_nft)
        except ValidationError as e:
            logging.warning(
                "[Workflow] Invalid input, nothing submitted",
                extra={"action": self.action.value, "error": str(e)},
            )
            self.last_error = e
            self.notifier.error(str(e))
            return WorkflowResult(action=self.action, success=False, error=e)

        self._transition(WorkflowState.SUBMITTING)
        logging.info(
            "[Workflow] Submitting transaction",
            extra={
                "action": self.action.value,
                "nft_id": self.selected_nft.id,
                "payload": intent.to_payload(),
            },
        )

        transaction_hash = None
        try:
            handle = await self.signer.submit(intent)
            transaction_hash = handle.hash
            await self._await_finalization(handle)
        except asyncio.CancelledError:
            logging.warning(
                "[Workflow] Submission cancelled before settling",
                extra={"action": self.action.value, "transaction_hash": transaction_hash},
            )
            self._clear()
            self._transition(WorkflowState.IDLE)
            raise
        except Exception as e:
            return self._settle_failure(e, transaction_hash)

        return await self._settle_success(transaction_hash)

    @abstractmethod
    def build_intent(self, nft: NFT) -> TransactionIntent:
        pass

    def check_selectable(self, nft: NFT) -> None:
        pass

    def reset_inputs(self) -> None:
        pass

    async def _await_finalization(self, handle) -> None:
        timeout = self.config.ledger_config.finalization_timeout_in_secs
        try:
            await asyncio.wait_for(self.signer.await_finalization(handle), timeout)
        except asyncio.TimeoutError as e:
            raise SubmissionTimedOut(
                f"Transaction {handle.hash} was not finalized within {timeout} seconds"
            ) from e

    def _settle_failure(
        self, error: Exception, transaction_hash: Optional[str]
    ) -> WorkflowResult:
        if not isinstance(error, SubmissionError):
            wrapped = SubmissionError(str(error))
            wrapped.__cause__ = error
            error = wrapped

        self._transition(WorkflowState.SETTLED)
        logging.error(
            "[Workflow] Transaction failed",
            extra={
                "action": self.action.value,
                "nft_id": self.selected_nft.id if self.selected_nft else None,
                "transaction_hash": transaction_hash,
                "error": str(error),
            },
            exc_info=error,
        )
        WORKFLOW_OUTCOMES_COUNTER.labels(action=self.action.value, outcome="failure").inc()
        self.notifier.error(self.failure_message)

        if self.close_on_failure:
            self._clear()
            self._transition(WorkflowState.IDLE)
        else:
            self._transition(WorkflowState.CONFIRMING)
        self.last_error = error
        return WorkflowResult(
            action=self.action,
            success=False,
            transaction_hash=transaction_hash,
            error=error,
        )

    async def _settle_success(self, transaction_hash: Optional[str]) -> WorkflowResult:
        self._transition(WorkflowState.SETTLED)
        logging.info(
            "[Workflow] Transaction finalized",
            extra={"action": self.action.value, "transaction_hash": transaction_hash},
        )
        WORKFLOW_OUTCOMES_COUNTER.labels(action=self.action.value, outcome="success").inc()
        self.notifier.success(self.success_message)
        self._clear()
        self._transition(WorkflowState.IDLE)

        if self.on_success is not None:
            try:
                await self.on_success()
            except Exception:
                logging.exception(
                    "[Workflow] Refresh after settlement failed",
                    extra={"action": self.action.value},
                )

        return WorkflowResult(
            action=self.action, success=True, transaction_hash=transaction_hash
        )

    def _clear(self) -> None:
        self.selected_nft = None
        self.last_error = None
        self.reset_inputs()

    def _require_state(self, *states: WorkflowState) -> None:
        if self.state not in states:
            raise WorkflowStateError(
                f"{self.action.value} workflow is {self.state.value}, "
                f"expected one of {[state.value for state in states]}"
            )

    def _transition(self, new_state: WorkflowState) -> None:
        previous = self.state
        self.state = new_state
        for listener in self._listeners:
            listener(previous, new_state)


class PurchaseWorkflow(ConfirmationWorkflow):
    action = ActionKind.PURCHASE
    success_message = "NFT purchased successfully!"
    failure_message = "Failed to purchase NFT."

    def build_intent(self, nft: NFT) -> TransactionIntent:
        return build_purchase_intent(self.config, nft)


class ListForSaleWorkflow(ConfirmationWorkflow):
    action = ActionKind.LIST_FOR_SALE
    success_message = "NFT listed for sale successfully!"
    failure_message = "Failed to list NFT for sale."

    def __init__(self, *args, **kwargs):
        self.price_text = ""
        super().__init__(*args, **kwargs)

    def check_selectable(self, nft: NFT) -> None:
        if nft.for_sale:
            raise ValidationError(f"NFT {nft.id} is already listed for sale.")

    def reset_inputs(self) -> None:
        self.price_text = ""

    def set_price(self, price_text: str) -> None:
        self._require_state(WorkflowState.CONFIRMING)
        self.price_text = price_text

    def build_intent(self, nft: NFT) -> TransactionIntent:
        return build_list_for_sale_intent(self.config, nft, self.price_text)


class TipWorkflow(ConfirmationWorkflow):
    action = ActionKind.TIP
    success_message = "Tip sent successfully!"
    failure_message = "Failed to send tip."
    presets = constants.TIP_PRESETS

    def __init__(self, *args, **kwargs):
        self.amount_text = constants.DEFAULT_TIP_AMOUNT
        super().__init__(*args, **kwargs)

    def reset_inputs(self) -> None:
        self.amount_text = constants.DEFAULT_TIP_AMOUNT

    def set_amount(self, amount_text: str) -> None:
        self._require_state(WorkflowState.CONFIRMING)
        self.amount_text = amount_text

    def choose_preset(self, value: float) -> None:
        if value not in self.presets:
            raise ValidationError(f"{value} is not a preset tip amount.")
        self.set_amount(str(value))

    def build_intent(self, nft: NFT) -> TransactionIntent:
        return build_tip_intent(self.config, nft, self.amount_text)


class GiftWorkflow(ConfirmationWorkflow):
    action = ActionKind.GIFT
    success_message = "NFT gifted successfully!"
    failure_message = "Failed to transfer NFT ownership."

    def __init__(self, *args, **kwargs):
        self.recipient_address = ""
        super().__init__(*args, **kwargs)

    def reset_inputs(self) -> None:
        self.recipient_address = ""

    def set_recipient(self, recipient_address: str) -> None:
        self._require_state(WorkflowState.CONFIRMING)
        self.recipient_address = recipient_address

    def build_intent(self, nft: NFT) -> TransactionIntent:
        return build_transfer_intent(self.config, nft, self.recipient_address)
