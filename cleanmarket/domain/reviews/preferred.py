"""Preferred cleaner coordinator - Homeowner reviews can grant or revoke preferred status"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...services.notification_service import send_preferred_cleaner_notification
from .repository import ReviewRepository

logger = logging.getLogger(__name__)


class PreferredCleanerCoordinator:
    """Keeps HomePreferredCleaner in line with the homeowner's latest review"""

    def __init__(
        self,
        db: Session,
        repo: ReviewRepository = None,
        schedule: Optional[Callable] = None,
    ):
        """
        Args:
            db: Database session
            repo: Review repository
            schedule: Runs a notification coroutine after the response is sent,
                normally BackgroundTasks.add_task. Notifications are skipped without it.
        """
        self.db = db
        self.repo = repo or ReviewRepository()
        self.schedule = schedule

    def reconcile(
        self,
        home_id: int,
        cleaner_id: int,
        requested_preferred: bool,
        homeowner_id: Optional[int] = None,
    ) -> bool:
        """
        Create or remove the preferred row for (home, cleaner).

        Returns True when the cleaner is preferred for the home afterwards.
        Never raises; failures are logged and the review submission goes on.
        """
        try:
            existing = self.repo.get_preferred_cleaner(self.db, home_id, cleaner_id)

            if requested_preferred:
                if existing:
                    logger.debug(f"Cleaner {cleaner_id} already preferred for home {home_id}")
                    return True
                self.repo.create_preferred_cleaner(self.db, home_id, cleaner_id, set_by="review")
                logger.info(f"⭐ Cleaner {cleaner_id} set as preferred for home {home_id} via review")
                self._notify(home_id, cleaner_id, homeowner_id)
                return True

            if existing:
                self.repo.delete_preferred_cleaner(self.db, existing)
                logger.info(f"Removed preferred status of cleaner {cleaner_id} for home {home_id}")
            return False

        except Exception as e:
            self.db.rollback()
            logger.error(
                f"❌ Failed to update preferred cleaner {cleaner_id} for home {home_id}: {e}"
            )
            return False

    def _notify(self, home_id: int, cleaner_id: int, homeowner_id: Optional[int]) -> None:
        if not self.schedule:
            logger.debug("No background scheduler, preferred cleaner notification skipped")
            return

        try:
            cleaner = self.repo.get_user(self.db, cleaner_id)
            if not cleaner:
                logger.warning(f"⚠️ Preferred cleaner {cleaner_id} not found, notification skipped")
                return

            homeowner = self.repo.get_user(self.db, homeowner_id) if homeowner_id else None
            home = self.repo.get_home(self.db, home_id)

            self.schedule(
                send_preferred_cleaner_notification,
                cleaner_email=cleaner.email,
                cleaner_push_token=cleaner.expo_push_token,
                cleaner_first_name=cleaner.first_name or cleaner.username or "there",
                homeowner_name=homeowner.display_name if homeowner else "A homeowner",
                home_label=home.label if home else "a property",
                home_id=home_id,
            )
        except Exception as e:
            logger.error(f"❌ Failed to queue preferred cleaner notification for {cleaner_id}: {e}")
