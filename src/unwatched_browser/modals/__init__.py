"""Modal dialogs for the queue browser TUI.

Import modals from this package: ``from unwatched_browser.modals import HelpScreen``
"""

# channels.py: add channel, channel list
from unwatched_browser.modals.channels import AddChannelModal, ChannelListModal

# common.py: general-purpose dialogs
from unwatched_browser.modals.common import HelpScreen

# search.py: command palette
from unwatched_browser.modals.search import CommandPaletteModal

__all__ = [
    "AddChannelModal",
    "ChannelListModal",
    "CommandPaletteModal",
    "HelpScreen",
]
