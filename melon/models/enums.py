from enum import Enum


class NotificationType(Enum):
    REACTION = "reaction"
    REPLY = "reply"
    FOLLOW = "follow"


class ReactionEmoji(Enum):
    CLAP = "👏"
    HEART = "💖"
    LAUGH = "🤣"


# Order is the display order of the reaction panel.
PRESET_EMOJIS = [e.value for e in ReactionEmoji]

# Top-level posts are depth 0; replies stop accepting replies at this depth.
MAX_REPLY_DEPTH = 2
