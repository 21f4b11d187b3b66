import logging
from datetime import datetime, UTC

from cloudpaste import policy
from cloudpaste.models import ExpirationPolicy, Paste
from cloudpaste.dao.base import PasteBaseDAO
from cloudpaste.events import EventPublisherBase, PasteCreated
from cloudpaste.constants import Defaults
from cloudpaste.utils.shortener import generate_shortcode


logger = logging.getLogger(__name__)


class PasteCreationService:
    """Create pastes and announce them on the event channel

    The paste is written to the Primary Store first, then to the Mirror Store,
    and only then announced with PasteCreated (which is what gets it ledgered
    for cleanup). Any failure propagates to the caller.
    """

    def __init__(
        self,
        primary: PasteBaseDAO,
        mirror: PasteBaseDAO,
        publisher: EventPublisherBase,
        salt: str = Defaults.SHORTCODE_SALT,
    ):
        self.primary = primary
        self.mirror = mirror
        self.publisher = publisher
        self.salt = salt

    def create(self, content: str, expiration_policy: ExpirationPolicy, now: datetime | None = None) -> Paste:
        """Store a new paste and return it

        Raises:
            ValueError:
                If `content` is empty.
            InvalidPolicyConfigurationError:
                If the expiration policy is malformed.
            PasteAlreadyExistsError:
                If the generated url is taken.
            DataStoreError:
                If a store or the event channel is unreachable.
        """
        if not content:
            raise ValueError('Paste content must be a non-empty string.')
        policy.validate_policy(expiration_policy)

        counter = self.primary.count(increment=True)
        paste = Paste(
            url=generate_shortcode(counter, salt=self.salt),
            content=content,
            created_at=now or datetime.now(UTC),
            # New pastes are never read
            expiration_policy=ExpirationPolicy(type=expiration_policy.type, duration=expiration_policy.duration),
        )

        self.primary.insert(paste)
        self.mirror.insert(paste)
        try:
            self.publisher.publish(
                PasteCreated(url=paste.url, created_at=paste.created_at, expiration_policy=paste.expiration_policy),
            )
        except Exception as e:
            # Stored but never ledgered: cleanup will not know about this paste
            logger.error(
                'Failed to publish PasteCreated event. Paste is stored without a ledger entry.',
                extra={'url': paste.url, 'policy': str(paste.expiration_policy.type), 'error': repr(e)},
            )
            raise

        logger.info('Created paste.', extra={'url': paste.url, 'policy': str(paste.expiration_policy.type)})
        return paste
