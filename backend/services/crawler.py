"""
Crawler Detector - erkennt Link-Preview-Bots am User-Agent

False Negatives (unbekannte Bots) sind ok, die landen im normalen Routing.
False Positives sind ein Bug: ein Mensch bekäme die statische Preview statt
der App. Die Liste enthält daher nur eindeutige Bot-Tokens.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

BOT_UA_PATTERNS = [
    'Slackbot', 'Discordbot', 'Twitterbot', 'facebookexternalhit',
    'LinkedInBot', 'Applebot', 'WhatsApp', 'TelegramBot',
]

_BOT_UA_PATTERNS_LOWER = [p.lower() for p in BOT_UA_PATTERNS]


def is_crawler(user_agent: Optional[str]) -> bool:
    """Case-insensitive Substring-Match gegen BOT_UA_PATTERNS"""
    if not user_agent:
        return False

    ua_lower = user_agent.lower()
    return any(pattern in ua_lower for pattern in _BOT_UA_PATTERNS_LOWER)
