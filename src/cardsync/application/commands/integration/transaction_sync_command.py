"""Sync card portal transactions into the ledger."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from cardsync.application.dtos.integration import (
    ProgressCallback,
    ProgressEmitter,
    SyncProgressEvent,
    SyncRunResult,
    SyncStep,
)
from cardsync.application.services import (
    AccountResolver,
    AmbiguousAccounts,
    BatchUploader,
    SessionAuthenticator,
    TransactionFetcher,
    TransactionTransformer,
    UploadSummary,
)
from cardsync.application.services.transaction_transformer import ExpenseSign
from cardsync.domain.banking.services import DateChunker
from cardsync.domain.ledger.exceptions import LedgerWriteError
from cardsync.domain.ledger.value_objects import ImportMarker
from cardsync.domain.shared.exceptions import DomainException, ErrorKind
from cardsync.domain.shared.time import today_local, utc_now
from cardsync.domain.shared.value_objects import SecureString
from cardsync.infrastructure.banking import PortalApiClient
from cardsync.infrastructure.browser import PlaywrightBrowserSession
from cardsync.infrastructure.ledger import LunchMoneyClient

if TYPE_CHECKING:
    from cardsync.domain.banking.ports import BrowserSessionPort, CardPortalPort
    from cardsync.domain.banking.value_objects import (
        CardTransaction,
        DateRange,
        SessionCredential,
    )
    from cardsync.domain.ledger.ports import LedgerPort
    from cardsync_config import Settings

logger = logging.getLogger(__name__)

BrowserFactory = Callable[[], Awaitable["BrowserSessionPort"]]
PortalFactory = Callable[["SessionCredential"], "CardPortalPort"]


@dataclass(frozen=True)
class SyncOptions:
    """Everything a run needs to know besides its collaborators."""

    username: SecureString
    password: SecureString
    ledger_account_id: int
    lookback_days: int
    base_url: str = "https://www.icscards.nl"
    configured_account: Optional[str] = None
    external_id_suffix: Optional[str] = None
    expense_sign: ExpenseSign = "negative"
    skip_duplicates: bool = True
    batch_size: int = 500
    page_load_timeout: float = 30.0
    second_factor_timeout: float = 120.0

    @classmethod
    def from_settings(cls, settings: Settings) -> SyncOptions:
        return cls(
            username=SecureString.from_secret(settings.ics_email),
            password=SecureString.from_secret(settings.ics_password),
            ledger_account_id=settings.lunchmoney_asset_id,
            lookback_days=settings.sync_days,
            base_url=settings.ics_base_url,
            configured_account=settings.ics_account_number,
            external_id_suffix=settings.external_id_suffix,
            expense_sign=settings.ledger_expense_sign,
            skip_duplicates=settings.skip_duplicates,
            batch_size=settings.upload_batch_size,
            page_load_timeout=settings.page_load_timeout_seconds,
            second_factor_timeout=settings.second_factor_timeout_seconds,
        )


class TransactionSyncCommand:
    """
    Run one sync: login, pick the account, fetch, transform, upload.

    Owns the browser for the duration of the run and always closes it.
    Every outcome, including unexpected faults, ends in exactly one
    SyncRunResult; exceptions never escape ``execute``.
    """

    def __init__(  # noqa: PLR0913
        self,
        browser_factory: BrowserFactory,
        portal_factory: PortalFactory,
        ledger: LedgerPort,
        options: SyncOptions,
        clock: Callable[[], datetime] = utc_now,
        today: Callable[[], date] = today_local,
        authenticator_factory: Optional[
            Callable[[BrowserSessionPort], SessionAuthenticator]
        ] = None,
    ):
        self._browser_factory = browser_factory
        self._portal_factory = portal_factory
        self._ledger = ledger
        self._options = options
        self._clock = clock
        self._today = today
        self._authenticator_factory = (
            authenticator_factory or self._default_authenticator
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> TransactionSyncCommand:
        async def launch_browser() -> BrowserSessionPort:
            return await PlaywrightBrowserSession.launch(
                executable_path=settings.browser_executable_path,
                headless=settings.browser_headless,
            )

        def open_portal(credential: SessionCredential) -> CardPortalPort:
            return PortalApiClient(
                base_url=settings.ics_base_url,
                credential=credential,
            )

        return cls(
            browser_factory=launch_browser,
            portal_factory=open_portal,
            ledger=LunchMoneyClient(
                base_url=settings.lunchmoney_api_url,
                token=SecureString.from_secret(settings.lunchmoney_token),
            ),
            options=SyncOptions.from_settings(settings),
        )

    def _default_authenticator(
        self,
        browser: BrowserSessionPort,
    ) -> SessionAuthenticator:
        return SessionAuthenticator(
            browser,
            base_url=self._options.base_url,
            page_load_timeout=self._options.page_load_timeout,
            second_factor_timeout=self._options.second_factor_timeout,
        )

    async def close(self) -> None:
        """Release the ledger client. The browser never outlives a run."""
        await self._ledger.close()

    async def execute(
        self,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncRunResult:
        """Run the sync and return its terminal result."""
        progress = ProgressEmitter(on_progress)
        started = time.monotonic()
        browser: Optional[BrowserSessionPort] = None
        portal: Optional[CardPortalPort] = None

        await progress.step(
            SyncStep.SYNC_START,
            f"Starting sync for the last {self._options.lookback_days} days",
            syncDays=self._options.lookback_days,
        )
        try:
            await progress.step(SyncStep.BROWSER_LAUNCH, "Launching browser...")
            browser = await self._browser_factory()

            authenticator = self._authenticator_factory(browser)
            credential = await authenticator.authenticate(
                self._options.username,
                self._options.password,
                progress,
            )
            portal = self._portal_factory(credential)
            result = await self._sync_account(portal, progress)

        except DomainException as e:
            result = self._failure_from(e, progress)
        except Exception as e:
            logger.exception("Sync failed unexpectedly")
            result = SyncRunResult.failure(
                error=str(e) or type(e).__name__,
                step=progress.last_step or SyncStep.UNHANDLED_ERROR,
                kind=ErrorKind.UNHANDLED,
            )
        finally:
            await self._release(portal, browser)

        duration = time.monotonic() - started
        if result.success:
            logger.info("Sync completed in %.1fs: %s", duration, result.message)
            fields = {k: v for k, v in result.to_dict().items() if k != "message"}
            fields["durationSeconds"] = round(duration)
            await progress.emit(
                SyncProgressEvent(
                    step=SyncStep.SYNC_COMPLETE,
                    message=result.message,
                    fields=fields,
                ),
            )
        else:
            logger.error(
                "Sync failed at %s after %.1fs: %s",
                result.step,
                duration,
                result.error,
            )
            fields = {
                "error": result.error,
                "failedStep": result.step,
                "kind": result.kind.value if result.kind else None,
            }
            if result.inserted_before_failure is not None:
                fields["insertedBeforeFailure"] = result.inserted_before_failure
            await progress.step(SyncStep.SYNC_ERROR, "Sync failed", **fields)
        return result

    async def _sync_account(
        self,
        portal: CardPortalPort,
        progress: ProgressEmitter,
    ) -> SyncRunResult:
        today = self._today()
        resolution = await AccountResolver(portal).resolve(
            self._options.configured_account,
            progress,
            today=today,
        )
        if isinstance(resolution, AmbiguousAccounts):
            return SyncRunResult.failure(
                error=resolution.render_report(),
                step=SyncStep.ACCOUNT_AMBIGUOUS,
                kind=ErrorKind.ACCOUNT_AMBIGUOUS,
                accounts=resolution.to_list(),
            )
        account_number = resolution.account_number

        window = DateChunker.lookback_window(self._options.lookback_days, today)
        ranges = DateChunker.chunk(self._options.lookback_days, today)
        await progress.step(
            SyncStep.FETCH_TRANSACTIONS,
            f"Fetching transactions {window} in {len(ranges)} chunk(s)...",
            fromDate=window.from_date.isoformat(),
            untilDate=window.until_date.isoformat(),
            chunks=len(ranges),
        )
        raws = await TransactionFetcher(portal).fetch(account_number, ranges, progress)

        if not raws:
            return SyncRunResult(
                success=True,
                message=f"No transactions found for period {window}",
                from_date=window.from_date,
                until_date=window.until_date,
                account_id=account_number,
                asset_id=self._options.ledger_account_id,
            )

        summary = await self._upload(raws, progress)
        return self._success_from(summary, len(raws), window, account_number)

    async def _upload(
        self,
        raws: list[CardTransaction],
        progress: ProgressEmitter,
    ) -> UploadSummary:
        tag_name = ImportMarker.tag_name_for(self._clock())
        await progress.step(
            SyncStep.TAG_CREATE,
            f"Creating tag {tag_name}",
            tag=tag_name,
        )
        marker = ImportMarker(
            tag_name=tag_name,
            tag_id=await self._ledger.ensure_tag(tag_name),
        )

        transformer = TransactionTransformer(
            ledger_account_id=self._options.ledger_account_id,
            expense_sign=self._options.expense_sign,
            external_id_suffix=self._options.external_id_suffix,
        )
        uploader = BatchUploader(
            self._ledger,
            batch_size=self._options.batch_size,
            skip_duplicates=self._options.skip_duplicates,
        )
        return await uploader.upload(transformer.transform_all(raws, marker), progress)

    def _success_from(
        self,
        summary: UploadSummary,
        fetched: int,
        window: DateRange,
        account_number: str,
    ) -> SyncRunResult:
        warning = None
        if summary.inserted == 0 and summary.submitted > 0:
            warning = (
                "No transactions were inserted - all were likely skipped as duplicates"
            )
            logger.warning(warning)
        return SyncRunResult(
            success=True,
            message=(
                f"Synced: {summary.inserted} inserted, {summary.skipped} skipped "
                f"(of {summary.submitted} total)"
            ),
            transactions_count=fetched,
            synced_count=summary.submitted,
            inserted_count=summary.inserted,
            skipped_count=summary.skipped,
            from_date=window.from_date,
            until_date=window.until_date,
            account_id=account_number,
            asset_id=self._options.ledger_account_id,
            warning=warning,
        )

    @staticmethod
    def _failure_from(e: DomainException, progress: ProgressEmitter) -> SyncRunResult:
        logger.error("Sync failed: %s (%s)", e.message, e.code.value)
        inserted_before_failure = None
        if isinstance(e, LedgerWriteError):
            inserted_before_failure = e.inserted_before_failure
            if inserted_before_failure:
                logger.warning(
                    "%d transaction(s) were inserted before the failure",
                    inserted_before_failure,
                )
        return SyncRunResult.failure(
            error=e.message,
            step=progress.last_step or SyncStep.UNHANDLED_ERROR,
            kind=e.kind,
            retryable=e.retryable,
            inserted_before_failure=inserted_before_failure,
        )

    async def _release(
        self,
        portal: Optional[CardPortalPort],
        browser: Optional[BrowserSessionPort],
    ) -> None:
        if portal is not None:
            try:
                await portal.close()
            except Exception as e:  # noqa: BLE001
                logger.warning("Error closing portal client: %s", e)
        if browser is not None:
            try:
                await browser.close()
                logger.debug("Browser closed")
            except Exception as e:  # noqa: BLE001
                logger.warning("Error closing browser: %s", e)
