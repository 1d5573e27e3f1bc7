from .draft import Draft
from .scheduled_post import ScheduledPost
from .social_account import SocialAccount
from .post_attempt import PostAttempt

__all__ = [
    "Draft",
    "ScheduledPost",
    "SocialAccount",
    "PostAttempt",
]
