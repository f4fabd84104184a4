"""Business operations layered on top of the entity store."""

from .accounts import Accounts
from .discussions import DiscussionThreads
from .economy import CoinEconomy
from .engagement import EngagementAggregator
from .notes import NoteCatalog
from .ranking import Ranking
from .social import SocialGraph

__all__ = [
    "Accounts",
    "CoinEconomy",
    "DiscussionThreads",
    "EngagementAggregator",
    "NoteCatalog",
    "Ranking",
    "SocialGraph",
]
