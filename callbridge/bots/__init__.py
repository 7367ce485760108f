"""Bots that take empty seats in online games."""

from callbridge.bots.base_bot import BaseBot
from callbridge.bots.random_bot import RandomBot

BOT_NAMES = ["Bot Alpha", "Bot Bravo", "Bot Charlie"]

__all__ = ["BOT_NAMES", "BaseBot", "RandomBot"]
